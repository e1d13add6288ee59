import logging
import time
from dataclasses import dataclass, field
from typing import override

from gridlab.app import dto
from gridlab.app.bus.interfaces.handler import Handler
from gridlab.app.contracts.cache import CountCache
from gridlab.app.contracts.context import Context
from gridlab.app.contracts.gateway import RepositoryGateway
from gridlab.app.contracts.pagination import CursorToken, PageRequest
from gridlab.app.contracts.types.user import FilterSpec, SortSpec
from gridlab.shared.types import Clock


log = logging.getLogger(__name__)


def _elapsed_ms(clock: Clock, started: float) -> float:
    return round((clock() - started) * 1000, 3)


class GetUsersByOffsetQuery(dto.BaseDTO):
    page: PageRequest
    filters: FilterSpec
    sort: SortSpec
    raw: dto.OffsetRequest


@dataclass(frozen=True, slots=True)
class GetUsersByOffsetQueryHandler(Handler[Context, GetUsersByOffsetQuery, dto.OffsetPage]):
    gateway: RepositoryGateway
    count_cache: CountCache
    clock: Clock = field(default=time.perf_counter)

    @override
    async def __call__(self, ctx: Context, qc: GetUsersByOffsetQuery, /) -> dto.OffsetPage:
        filters = qc.filters.normalize()

        async with self.gateway.manager:
            started = self.clock()
            total = await self.count_cache.get(filters)
            from_cache = total is not None
            if total is None:
                total = (await self.gateway.user.count(filters)).unwrap()
                await self.count_cache.set(filters, total)
            count_time_ms = _elapsed_ms(self.clock, started)
            log.debug(
                "Count %s for %r: %d [request_id=%s]",
                "hit" if from_cache else "miss",
                filters,
                total,
                ctx.request_id,
            )

            started = self.clock()
            rows: list[dto.user.UserRow] = []
            # a cached zero can be stale, rows are always read for it
            if total > 0 or from_cache:
                result = (
                    await self.gateway.user.get_many_by_offset(
                        filters,
                        qc.sort,
                        offset=qc.page.offset,
                        limit=qc.page.page_size,
                        total=total,
                    )
                ).unwrap()
                rows = list(result.items)
            query_time_ms = _elapsed_ms(self.clock, started)

        return dto.OffsetPage(
            rows=rows,
            total_count=total,
            request=qc.raw,
            meta=dto.OffsetMeta(
                query_time_ms=query_time_ms,
                count_time_ms=count_time_ms,
                count_from_cache=from_cache,
                count_cache_ttl_ms=round(self.count_cache.ttl * 1000),
                page=qc.page.page,
                page_size=qc.page.page_size,
                sort=str(qc.sort),
                status=filters.status,
                search=filters.search,
            ),
        )


class GetUsersByKeysetQuery(dto.BaseDTO):
    page_size: int
    filters: FilterSpec
    cursor: CursorToken | None = None


@dataclass(frozen=True, slots=True)
class GetUsersByKeysetQueryHandler(Handler[Context, GetUsersByKeysetQuery, dto.KeysetPage]):
    gateway: RepositoryGateway
    clock: Clock = field(default=time.perf_counter)

    @override
    async def __call__(self, ctx: Context, qc: GetUsersByKeysetQuery, /) -> dto.KeysetPage:
        filters = qc.filters.normalize()

        async with self.gateway.manager:
            started = self.clock()
            result = (
                await self.gateway.user.get_many_by_keyset(
                    filters,
                    qc.cursor,
                    limit=qc.page_size,
                )
            ).unwrap()
            query_time_ms = _elapsed_ms(self.clock, started)

        return dto.KeysetPage(
            rows=list(result.items),
            next_cursor=dto.Cursor.from_token(result.next_cursor),
            meta=dto.KeysetMeta(
                query_time_ms=query_time_ms,
                page_size=qc.page_size,
                status=filters.status,
                search=filters.search,
                used_cursor=dto.Cursor.from_token(qc.cursor),
            ),
        )
