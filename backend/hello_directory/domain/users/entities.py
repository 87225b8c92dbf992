"""
User Domain Entities

The user record exchanged between the directory, its storage and the API.
"""

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

# Attributes a merge-patch may overwrite; natural keys are handled separately
PATCHABLE_ATTRIBUTES = ("first_name", "last_name", "active")


@dataclass
class UserRecord:
    """
    User record.

    ``id`` is absent until storage assigns it and never changes afterwards.
    ``username`` and ``email`` are unique across persisted records when set.
    """

    id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def copy(self, **changes: Any) -> "UserRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def merge(self, patch: "UserRecord") -> "UserRecord":
        """Overlay the non-null patchable attributes of ``patch``."""
        changes = {
            name: getattr(patch, name)
            for name in PATCHABLE_ATTRIBUTES
            if getattr(patch, name) is not None
        }
        return self.copy(**changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
