from __future__ import annotations

from datetime import datetime

from gridlab.app.contracts.pagination import as_utc
from gridlab.app.contracts.types.user import UserStatus

from .base import CamelDTO


class UserRow(CamelDTO):
    id: int
    name: str
    email: str
    status: UserStatus
    created_at: datetime

    def __post_init__(self) -> None:
        # storages without timezone support hand back naive UTC values
        self.created_at = as_utc(self.created_at)
