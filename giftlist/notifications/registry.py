"""
Notification type registry.

Maps a notification discriminant to its metadata model, display
generators and view capability. The registry is filled once at startup,
frozen, and then only read.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, Union

from giftlist.notifications.types import NotificationCategory, NotificationMetadata


class UnknownNotificationTypeError(KeyError):
    """Raised when a notification type has no registry entry."""

    def __init__(self, notification_type: str):
        super().__init__(notification_type)
        self.notification_type = notification_type

    def __str__(self) -> str:
        return f"Unknown notification type: {self.notification_type}"


def _no_action_url(metadata: Any) -> Optional[str]:
    return None


@dataclass(frozen=True)
class NotificationTypeEntry:
    """
    Everything needed to validate and display one notification type.

    Generators take the parsed metadata model and must be pure.
    """

    type: str
    metadata_model: Type[NotificationMetadata]
    category: NotificationCategory
    title: Callable[[Any], str]
    message: Callable[[Any], str]
    action_url: Callable[[Any], Optional[str]] = _no_action_url
    component: str = "default"
    badge: Optional[Callable[[Any], Optional[str]]] = None
    icon: str = "bell"
    color: str = "text-primary"
    priority: int = 3

    def parse(self, metadata: Optional[Dict[str, Any]]) -> NotificationMetadata:
        """
        Validate raw metadata against this type's model.

        Raises:
            pydantic.ValidationError: If the metadata does not fit the model
        """
        return self.metadata_model.model_validate(metadata or {})


def _type_key(notification_type: Union[str, Enum]) -> str:
    if isinstance(notification_type, Enum):
        return notification_type.value
    return notification_type


class NotificationTypeRegistry:
    """
    Registry of notification types keyed by discriminant.
    """

    def __init__(self):
        """Initialize empty, unfrozen registry."""
        self._entries: Dict[str, NotificationTypeEntry] = {}
        self._frozen = False

    def register(self, entry: NotificationTypeEntry) -> None:
        """
        Register a notification type.

        Raises:
            RuntimeError: If the registry is frozen
            ValueError: If the type is already registered
        """
        if self._frozen:
            raise RuntimeError(
                f"Cannot register '{entry.type}': notification registry is frozen"
            )

        key = _type_key(entry.type)
        if key in self._entries:
            raise ValueError(f"Notification type '{key}' already registered")
        self._entries[key] = entry

    def freeze(self) -> "NotificationTypeRegistry":
        """Close the registry to further registration."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, notification_type: Union[str, Enum]) -> NotificationTypeEntry:
        """
        Get the entry for a type.

        Raises:
            UnknownNotificationTypeError: If the type is not registered
        """
        key = _type_key(notification_type)
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownNotificationTypeError(key) from None

    def has(self, notification_type: Union[str, Enum]) -> bool:
        return _type_key(notification_type) in self._entries

    def all_types(self) -> List[str]:
        return list(self._entries.keys())

    def types_by_category(self, category: NotificationCategory) -> List[str]:
        """Get all registered types in a category."""
        return [
            key for key, entry in self._entries.items()
            if entry.category == category
        ]

    def __len__(self) -> int:
        return len(self._entries)
