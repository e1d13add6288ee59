from typing import Any, Protocol, Self, runtime_checkable


@runtime_checkable
class DTO(Protocol):
    @classmethod
    def from_attributes(cls, value: Any) -> Self: ...
