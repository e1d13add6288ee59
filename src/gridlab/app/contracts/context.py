from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Context:
    request_id: str | None = None
