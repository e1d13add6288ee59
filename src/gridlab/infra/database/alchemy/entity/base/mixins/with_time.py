from datetime import UTC, datetime

from sqlalchemy import orm

from gridlab.infra.database.alchemy.types import UtcDateTime


def utc_now() -> datetime:
    return datetime.now(UTC)


class WithCreatedTimeMixin(orm.MappedAsDataclass):
    created_at: orm.Mapped[datetime] = orm.mapped_column(
        UtcDateTime(),
        default_factory=utc_now,
        index=True,
        init=False,
    )
