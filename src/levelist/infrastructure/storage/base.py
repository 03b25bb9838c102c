"""Base abstraction for key-value byte stores."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Synchronous key-value byte store.

    Implementations raise whatever their medium raises (``OSError`` and the
    like); ``StoreAdapter`` converts those into ``StorageError``.
    """

    @abstractmethod
    def read(self, key: str) -> bytes | None:
        """Return the stored bytes, or ``None`` when the key is absent."""
        ...

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is a no-op."""
        ...
