from .api import GridApiClient, KeysetParams, OffsetParams
from .sequencer import (
    CancelToken,
    RequestSequencer,
    RequestTicket,
    SequenceGate,
    TicketState,
)


__all__ = (
    "CancelToken",
    "GridApiClient",
    "KeysetParams",
    "OffsetParams",
    "RequestSequencer",
    "RequestTicket",
    "SequenceGate",
    "TicketState",
)
