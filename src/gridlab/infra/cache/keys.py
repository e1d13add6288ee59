from typing import Final

from gridlab.app.common.tools import msgspec_encoder
from gridlab.app.contracts.types.user import FilterSpec


COUNT_KEY_PREFIX: Final[str] = "count:"


def count_cache_key(filters: FilterSpec) -> str:
    # filters differing only in surrounding whitespace share an entry
    return COUNT_KEY_PREFIX + msgspec_encoder(
        filters.normalize().as_dict(exclude_none=False),
        order="sorted",
    )
