"""Latest-request-wins coordination for a grid client.

Parameter changes are debounced, each dispatched request gets a ticket with a
strictly increasing sequence number, and a response is applied only while its
ticket is the newest one issued. Older in-flight requests are canceled when a
newer one is dispatched; if one still completes, the gate turns it into a no-op.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Final, Self

from config.core import GridConfig
from gridlab.app.contracts.exceptions import RequestTimeoutError


log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE: Final[float] = 0.35
DEFAULT_TIMEOUT: Final[float] = 10.0


@enum.unique
class TicketState(enum.StrEnum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    IN_FLIGHT = "in_flight"
    APPLIED = "applied"
    SUPERSEDED = "superseded"
    CANCELED = "canceled"
    FAILED = "failed"


class CancelToken:
    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_canceled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(slots=True, eq=False)
class RequestTicket:
    seq: int
    cancel_token: CancelToken = field(default_factory=CancelToken)
    state: TicketState = TicketState.IN_FLIGHT


class SequenceGate:
    """Issues tickets and decides, in one place, whether a response may be applied."""

    __slots__ = (
        "_current",
        "_in_flight",
    )

    def __init__(self) -> None:
        self._current = 0
        self._in_flight: dict[int, RequestTicket] = {}

    @property
    def current(self) -> int:
        return self._current

    def issue(self) -> RequestTicket:
        for older in self._in_flight.values():
            older.cancel_token.cancel()
            older.state = TicketState.CANCELED
        self._in_flight.clear()

        self._current += 1
        ticket = RequestTicket(seq=self._current)
        self._in_flight[ticket.seq] = ticket

        return ticket

    def is_current(self, ticket: RequestTicket) -> bool:
        return ticket.seq == self._current

    def settle(self, ticket: RequestTicket, *, failed: bool = False) -> TicketState:
        self._in_flight.pop(ticket.seq, None)

        if ticket.state is TicketState.CANCELED:
            return ticket.state

        if not self.is_current(ticket):
            ticket.state = TicketState.SUPERSEDED
        else:
            ticket.state = TicketState.FAILED if failed else TicketState.APPLIED

        return ticket.state

    def cancel_all(self) -> None:
        for ticket in self._in_flight.values():
            ticket.cancel_token.cancel()
            ticket.state = TicketState.CANCELED
        self._in_flight.clear()


type Fetch[P, R] = Callable[[P, CancelToken], Awaitable[R]]


class RequestSequencer[P, R]:
    __slots__ = (
        "_debounce",
        "_debounce_task",
        "_error",
        "_fetch",
        "_gate",
        "_has_result",
        "_on_applied",
        "_on_failed",
        "_result",
        "_tasks",
        "_tickets",
        "_timeout",
    )

    def __init__(
        self,
        fetch: Fetch[P, R],
        *,
        debounce: float = DEFAULT_DEBOUNCE,
        timeout: float | None = DEFAULT_TIMEOUT,
        on_applied: Callable[[R], None] | None = None,
        on_failed: Callable[[Exception], None] | None = None,
        gate: SequenceGate | None = None,
    ) -> None:
        assert debounce >= 0, "debounce must not be negative"
        self._fetch = fetch
        self._debounce = debounce
        self._timeout = timeout
        self._on_applied = on_applied
        self._on_failed = on_failed
        self._gate = gate or SequenceGate()
        self._debounce_task: asyncio.Task[None] | None = None
        self._tasks: dict[int, asyncio.Task[None]] = {}
        self._tickets: dict[int, RequestTicket] = {}
        self._result: R | None = None
        self._has_result = False
        self._error: Exception | None = None

    @classmethod
    def from_config(cls, fetch: Fetch[P, R], config: GridConfig, **kw: Any) -> Self:
        return cls(
            fetch,
            debounce=config.debounce_ms / 1000,
            timeout=config.client_timeout_seconds,
            **kw,
        )

    @property
    def gate(self) -> SequenceGate:
        return self._gate

    @property
    def state(self) -> TicketState:
        if self._debounce_task is not None and not self._debounce_task.done():
            return TicketState.DEBOUNCING

        ticket = self._tickets.get(self._gate.current)
        if ticket is None:
            return TicketState.IDLE

        return ticket.state

    def submit(self, params: P) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()

        self._debounce_task = asyncio.create_task(self._debounced(params))

    def dispatch(self, params: P) -> RequestTicket:
        ticket = self._gate.issue()
        for seq, task in self._tasks.items():
            if seq != ticket.seq and not task.done():
                task.cancel()

        self._tickets = {ticket.seq: ticket}
        self._tasks = {seq: task for seq, task in self._tasks.items() if not task.done()}
        self._tasks[ticket.seq] = asyncio.create_task(self._run(ticket, params))

        return ticket

    async def settle(self) -> R:
        """Wait until the newest submitted parameters are settled.

        Returns the applied result or raises the failure of the newest ticket.
        """
        while True:
            if self._debounce_task is not None and not self._debounce_task.done():
                await asyncio.wait((self._debounce_task,))
                continue

            task = self._tasks.get(self._gate.current)
            if task is not None and not task.done():
                await asyncio.wait((task,))
                continue

            break

        if self._error is not None:
            raise self._error

        if not self._has_result:
            raise LookupError("No request has been applied")

        return self._result  # type: ignore[return-value]

    async def aclose(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
        self._gate.cancel_all()

        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)

    async def _debounced(self, params: P) -> None:
        await asyncio.sleep(self._debounce)
        self.dispatch(params)

    async def _run(self, ticket: RequestTicket, params: P) -> None:
        try:
            async with asyncio.timeout(self._timeout):
                result = await self._fetch(params, ticket.cancel_token)
        except asyncio.CancelledError:
            if ticket.cancel_token.is_canceled:
                log.debug("Request #%d canceled", ticket.seq)
                self._gate.settle(ticket)
            raise
        except TimeoutError as e:
            error: Exception = RequestTimeoutError(
                f"Request #{ticket.seq} timed out after {self._timeout}s"
            )
            error.__cause__ = e
        except Exception as e:  # noqa: BLE001
            error = e
        else:
            self._apply(ticket, result)
            return
        finally:
            self._tasks.pop(ticket.seq, None)

        self._fail(ticket, error)

    def _apply(self, ticket: RequestTicket, result: R) -> None:
        state = self._gate.settle(ticket)
        if state is not TicketState.APPLIED:
            log.debug("Dropping response of request #%d: %s", ticket.seq, state)
            return

        self._result, self._has_result, self._error = result, True, None
        if self._on_applied is not None:
            self._on_applied(result)

    def _fail(self, ticket: RequestTicket, error: Exception) -> None:
        state = self._gate.settle(ticket, failed=True)
        if state is not TicketState.FAILED:
            log.debug("Dropping failure of request #%d (%s): %r", ticket.seq, state, error)
            return

        log.warning("Request #%d failed: %r", ticket.seq, error)
        self._error = error
        if self._on_failed is not None:
            self._on_failed(error)
