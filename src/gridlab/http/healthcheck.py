from litestar import MediaType, get, status_codes

from gridlab.app import dto


@get(
    "/healthcheck",
    media_type=MediaType.JSON,
    tags=["healthcheck"],
    status_code=status_codes.HTTP_200_OK,
)
async def healthcheck_endpoint() -> dto.Status:
    return dto.Status(status=True)
