from dataclasses import dataclass, is_dataclass
from typing import Any, ClassVar, dataclass_transform

from litestar import MediaType, status_codes
from litestar.openapi.datastructures import ResponseSpec
from litestar.openapi.spec import Example


@dataclass_transform()
class BaseDoc:
    message: str
    detail: str | None = None
    status_code: ClassVar[int] = status_codes.HTTP_500_INTERNAL_SERVER_ERROR
    examples: ClassVar[tuple[dict[str, Any], ...]] = ()

    def __init_subclass__(cls, **kw: Any) -> None:
        if not is_dataclass(cls):
            dataclass(frozen=kw.pop("frozen", True), **kw)(cls)

    @classmethod
    def to_spec(cls, media_type: MediaType = MediaType.JSON) -> dict[int, ResponseSpec]:
        values = cls.examples or ({"message": cls.message},)
        return {
            cls.status_code: ResponseSpec(
                cls,
                generate_examples=False,
                description=cls.message,
                media_type=media_type,
                examples=[Example(summary=value["message"], value=value) for value in values],
            ),
        }


class BadRequest(BaseDoc):
    message: str = "Validation failed for GET /api/v1/users"
    status_code: ClassVar[int] = status_codes.HTTP_400_BAD_REQUEST
    examples: ClassVar[tuple[dict[str, Any], ...]] = (
        {"message": "Validation failed for GET /api/v1/users?page=abc"},
        {"message": "Validation failed for GET /api/v1/users?status=UNKNOWN"},
    )


class ServiceUnavailable(BaseDoc):
    message: str = "Service Unavailable"
    status_code: ClassVar[int] = status_codes.HTTP_503_SERVICE_UNAVAILABLE
    examples: ClassVar[tuple[dict[str, Any], ...]] = (
        {"message": "Storage is unavailable", "detail": "OperationalError"},
        {"message": "Count cache is unavailable", "detail": "ConnectionError"},
    )


class InternalServer(BaseDoc):
    message: str = "Internal Server Error"
    status_code: ClassVar[int] = status_codes.HTTP_500_INTERNAL_SERVER_ERROR
