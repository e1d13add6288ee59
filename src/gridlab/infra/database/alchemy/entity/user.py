from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import orm

from gridlab.app.contracts.types.user import UserStatus

from .base import Entity, mixins


class User(mixins.WithIDMixin, mixins.WithCreatedTimeMixin, Entity):
    # keyset pages seek on (created_at, id) instead of scanning skipped rows
    __table_args__ = (sa.Index("ix_users_created_at_id", "created_at", "id"),)

    name: orm.Mapped[str] = orm.mapped_column(sa.String(255), index=True)
    email: orm.Mapped[str] = orm.mapped_column(sa.String(320))
    status: orm.Mapped[UserStatus] = orm.mapped_column(
        sa.Enum(UserStatus, native_enum=False, length=16, validate_strings=True),
        index=True,
    )
