"""JSON adapter over a key-value byte store.

This is the only component that touches the storage medium. Every failure,
whether raised by the store or by decoding, surfaces as ``StorageError``.
"""

import json
from typing import Any

from levelist.core.exceptions import StorageError
from levelist.core.logging import get_logger
from levelist.infrastructure.storage.base import KeyValueStore

logger = get_logger(__name__)

_MISSING = object()


class StoreAdapter:
    """Reads and writes UTF-8 JSON documents by key."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_json(self, key: str, default: Any = _MISSING) -> Any:
        """Load and decode the document under ``key``.

        Args:
            key: Storage key.
            default: Returned when the key is absent. Without it an absent
                key returns ``None``.

        Raises:
            StorageError: If reading or decoding fails.
        """
        try:
            raw = self.store.read(key)
        except Exception as e:
            logger.error("Storage read failed", key=key, error=str(e))
            raise StorageError(f"Failed to read: {e}", key=key) from e
        if raw is None:
            return None if default is _MISSING else default
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Stored document is not valid JSON", key=key, error=str(e))
            raise StorageError(f"Stored data is corrupted: {e}", key=key) from e

    def save_json(self, key: str, value: Any) -> int:
        """Encode ``value`` and write it under ``key``.

        Returns:
            Number of bytes written.

        Raises:
            StorageError: If encoding or writing fails.
        """
        try:
            payload = json.dumps(value, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value is not JSON-serializable: {e}", key=key) from e
        try:
            self.store.write(key, payload)
        except Exception as e:
            logger.error("Storage write failed", key=key, error=str(e))
            raise StorageError(f"Failed to write: {e}", key=key) from e
        logger.debug("Storage write", key=key, size=len(payload))
        return len(payload)

    def remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception as e:
            logger.error("Storage remove failed", key=key, error=str(e))
            raise StorageError(f"Failed to remove: {e}", key=key) from e
