from __future__ import annotations

from datetime import datetime
from typing import Any, override

import sqlalchemy as sa

from gridlab.app.contracts.pagination import as_utc


class UtcDateTime(sa.TypeDecorator[datetime]):
    """Timezone-aware timestamp normalized to UTC on the way in and out.

    SQLite keeps no offset, so values are stored as naive UTC there and the offset
    is restored when reading.
    """

    impl = sa.DateTime(timezone=True)
    cache_ok = True

    @override
    def process_bind_param(self, value: datetime | None, dialect: sa.Dialect) -> datetime | None:
        if value is None:
            return None

        value = as_utc(value)
        return value.replace(tzinfo=None) if dialect.name == "sqlite" else value

    @override
    def process_result_value(self, value: Any | None, dialect: sa.Dialect) -> datetime | None:
        if value is None:
            return None

        return as_utc(value)
