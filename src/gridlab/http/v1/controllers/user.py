from typing import Annotated

from litestar import Controller, MediaType, Request, get, status_codes
from litestar.datastructures import State
from litestar.params import Parameter

from config.core import GridConfig
from gridlab.app import dto
from gridlab.app.contracts.pagination import CursorToken, PageRequest, clamp_page_size
from gridlab.app.contracts.types.user import DEFAULT_SORT, FilterSpec, SortSpec, UserStatus
from gridlab.app.use_cases import queries
from gridlab.http.common import docs


SearchParam = Annotated[
    str | None,
    Parameter(description="Case-insensitive substring of `name` or `email`"),
]
StatusParam = Annotated[UserStatus | None, Parameter(description="Exact `status`")]


class UserGridController(Controller):
    path = "/"
    tags = ["users"]

    @get(
        "/users",
        media_type=MediaType.JSON,
        status_code=status_codes.HTTP_200_OK,
        responses=docs.BadRequest.to_spec()
        | docs.ServiceUnavailable.to_spec()
        | docs.InternalServer.to_spec(),
    )
    async def get_users_by_offset_endpoint(
        self,
        query_bus: queries.QueryBus,
        grid_config: GridConfig,
        request: Request[None, None, State],
        search: SearchParam = None,
        status: StatusParam = None,
        page: Annotated[
            int | None,
            Parameter(description="1-based page number, values below 1 mean the first page"),
        ] = None,
        page_size: Annotated[
            int | None,
            Parameter(query="pageSize", description="Rows per page, clamped to the allowed range"),
        ] = None,
        sort: Annotated[
            str | None,
            Parameter(description=f"`<field>:<asc|desc>`, defaults to `{DEFAULT_SORT}`"),
        ] = None,
    ) -> dto.OffsetPage:
        return await query_bus(
            request.state.ctx,
            queries.user.get.GetUsersByOffsetQuery(
                page=PageRequest.coerce(
                    page,
                    page_size,
                    default_page_size=grid_config.default_page_size,
                    max_page_size=grid_config.max_page_size,
                ),
                filters=FilterSpec(search=search, status=status),
                sort=SortSpec.parse(sort),
                raw=dto.OffsetRequest(
                    page=page,
                    page_size=page_size,
                    sort=sort,
                    status=status,
                    search=search,
                ),
            ),
        )

    @get(
        "/users-cursor",
        media_type=MediaType.JSON,
        status_code=status_codes.HTTP_200_OK,
        responses=docs.BadRequest.to_spec()
        | docs.ServiceUnavailable.to_spec()
        | docs.InternalServer.to_spec(),
    )
    async def get_users_by_keyset_endpoint(
        self,
        query_bus: queries.QueryBus,
        grid_config: GridConfig,
        request: Request[None, None, State],
        search: SearchParam = None,
        status: StatusParam = None,
        page_size: Annotated[
            int | None,
            Parameter(query="pageSize", description="Rows per page, clamped to the allowed range"),
        ] = None,
        cursor_created_at: Annotated[
            str | None,
            Parameter(
                query="cursorCreatedAt",
                description="ISO-8601 `createdAt` of the last row seen, ignored when malformed",
            ),
        ] = None,
        cursor_id: Annotated[
            str | None,
            Parameter(
                query="cursorId",
                description="`id` of the last row seen, ignored when malformed",
            ),
        ] = None,
    ) -> dto.KeysetPage:
        return await query_bus(
            request.state.ctx,
            queries.user.get.GetUsersByKeysetQuery(
                page_size=clamp_page_size(
                    page_size,
                    default=grid_config.default_cursor_page_size,
                    maximum=grid_config.max_cursor_page_size,
                ),
                filters=FilterSpec(search=search, status=status),
                cursor=CursorToken.parse(cursor_created_at, cursor_id),
            ),
        )
