from typing import Any, Self

import msgspec

from gridlab.app.common.tools import msgspec_decoder


class BaseDTO(msgspec.Struct):
    @classmethod
    def from_string(cls, value: str | bytes) -> Self:
        return msgspec_decoder(value, type=cls, strict=False)

    @classmethod
    def from_attributes(cls, value: Any) -> Self:
        return msgspec.convert(value, cls, strict=False, from_attributes=True)


class CamelDTO(BaseDTO, rename="camel"): ...
