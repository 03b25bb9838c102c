"""Application services for LevelList.

Application services orchestrate domain services and infrastructure.
"""

from levelist.application.services.autosave_engine import AutosaveEngine, SaveStatus
from levelist.application.services.collection_controller import (
    CollectionController,
    GameDraft,
)
from levelist.application.services.notifications import (
    Notification,
    NotificationLevel,
    Notifier,
    log_notifier,
)

__all__ = [
    "AutosaveEngine",
    "CollectionController",
    "GameDraft",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "SaveStatus",
    "log_notifier",
]
