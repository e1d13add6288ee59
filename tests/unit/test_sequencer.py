from __future__ import annotations

import asyncio

import pytest

from gridlab.app.contracts.exceptions import AppError, RequestTimeoutError
from gridlab.client import CancelToken, RequestSequencer, RequestTicket, SequenceGate, TicketState


pytestmark = pytest.mark.anyio


class ControlledFetch:
    """Fetch whose responses are released by the test, one event per request."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.tokens: list[CancelToken] = []
        self.release: dict[str, asyncio.Event] = {}
        self.errors: dict[str, Exception] = {}

    async def __call__(self, params: str, cancel: CancelToken) -> str:
        self.calls.append(params)
        self.tokens.append(cancel)
        event = self.release.setdefault(params, asyncio.Event())
        await event.wait()
        if params in self.errors:
            raise self.errors[params]
        return f"result:{params}"

    def finish(self, params: str) -> None:
        self.release.setdefault(params, asyncio.Event()).set()


async def _tick() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def test_gate_applies_only_the_newest_ticket() -> None:
    gate = SequenceGate()
    first, second, third = gate.issue(), gate.issue(), gate.issue()

    assert [t.seq for t in (first, second, third)] == [1, 2, 3]
    assert gate.settle(third) is TicketState.APPLIED
    assert gate.settle(first) is TicketState.CANCELED
    assert gate.settle(second) is TicketState.CANCELED
    assert third.state is TicketState.APPLIED


def test_gate_cancels_older_tokens_on_issue() -> None:
    gate = SequenceGate()
    first = gate.issue()

    assert not first.cancel_token.is_canceled

    second = gate.issue()

    assert first.cancel_token.is_canceled
    assert first.state is TicketState.CANCELED
    assert not second.cancel_token.is_canceled
    assert gate.is_current(second)
    assert not gate.is_current(first)


def test_gate_marks_untracked_older_ticket_superseded() -> None:
    gate = SequenceGate()
    first = gate.issue()
    assert gate.settle(first) is TicketState.APPLIED
    gate.issue()

    late = RequestTicket(seq=first.seq)

    assert gate.settle(late) is TicketState.SUPERSEDED

async def test_debounce_burst_dispatches_once() -> None:
    fetch = ControlledFetch()
    applied: list[str] = []
    sequencer = RequestSequencer(fetch, debounce=0.02, on_applied=applied.append)

    for params in ("a", "ab", "abc"):
        sequencer.submit(params)
        await asyncio.sleep(0)

    assert sequencer.state is TicketState.DEBOUNCING

    fetch.finish("abc")
    result = await sequencer.settle()

    assert fetch.calls == ["abc"]
    assert result == "result:abc"
    assert applied == ["result:abc"]
    assert sequencer.state is TicketState.APPLIED


async def test_newer_dispatch_cancels_older_in_flight_request() -> None:
    fetch = ControlledFetch()
    applied: list[str] = []
    sequencer = RequestSequencer(fetch, debounce=0, on_applied=applied.append)

    first = sequencer.dispatch("one")
    await _tick()
    second = sequencer.dispatch("two")
    await _tick()

    assert fetch.tokens[0].is_canceled
    assert first.state is TicketState.CANCELED

    fetch.finish("one")
    fetch.finish("two")

    assert await sequencer.settle() == "result:two"
    assert second.state is TicketState.APPLIED
    assert applied == ["result:two"]


async def test_out_of_order_responses_converge_to_latest() -> None:
    fetch = ControlledFetch()
    applied: list[str] = []
    sequencer = RequestSequencer(fetch, debounce=0, on_applied=applied.append)

    tickets = [sequencer.dispatch(params) for params in ("1", "2", "3")]
    await _tick()
    for params in ("3", "1", "2"):
        fetch.finish(params)
        await _tick()

    assert await sequencer.settle() == "result:3"
    assert applied == ["result:3"]
    assert [t.state for t in tickets] == [
        TicketState.CANCELED,
        TicketState.CANCELED,
        TicketState.APPLIED,
    ]


async def test_failure_of_current_request_is_surfaced() -> None:
    fetch = ControlledFetch()
    failures: list[Exception] = []
    sequencer = RequestSequencer(fetch, debounce=0, on_failed=failures.append)
    fetch.errors["boom"] = AppError("Storage is unavailable")

    ticket = sequencer.dispatch("boom")
    fetch.finish("boom")

    with pytest.raises(AppError, match="Storage is unavailable"):
        await sequencer.settle()

    assert ticket.state is TicketState.FAILED
    assert failures == [fetch.errors["boom"]]


async def test_failure_of_superseded_request_is_dropped() -> None:
    failures: list[Exception] = []
    release = asyncio.Event()

    async def fetch(params: str, cancel: CancelToken) -> str:
        if params == "old":
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                # the response still arrives after the request was told to stop
                await release.wait()
                raise AppError("late failure") from None
        return "fresh"

    sequencer = RequestSequencer(fetch, debounce=0, on_failed=failures.append)
    sequencer.dispatch("old")
    await _tick()
    sequencer.dispatch("new")

    assert await sequencer.settle() == "fresh"

    release.set()
    await _tick()

    assert failures == []
    assert await sequencer.settle() == "fresh"


async def test_timeout_fails_the_current_request() -> None:
    fetch = ControlledFetch()
    failures: list[Exception] = []
    sequencer = RequestSequencer(fetch, debounce=0, timeout=0.05, on_failed=failures.append)

    ticket = sequencer.dispatch("slow")

    with pytest.raises(RequestTimeoutError):
        await sequencer.settle()

    assert ticket.state is TicketState.FAILED
    assert len(failures) == 1


async def test_success_clears_previous_failure() -> None:
    fetch = ControlledFetch()
    sequencer = RequestSequencer(fetch, debounce=0)
    fetch.errors["bad"] = AppError("nope")

    sequencer.dispatch("bad")
    fetch.finish("bad")
    with pytest.raises(AppError):
        await sequencer.settle()

    sequencer.dispatch("good")
    fetch.finish("good")

    assert await sequencer.settle() == "result:good"


async def test_settle_before_anything_applied() -> None:
    sequencer = RequestSequencer(ControlledFetch(), debounce=0)

    assert sequencer.state is TicketState.IDLE
    with pytest.raises(LookupError):
        await sequencer.settle()


async def test_aclose_cancels_pending_work() -> None:
    fetch = ControlledFetch()
    applied: list[str] = []
    sequencer = RequestSequencer(fetch, debounce=0, on_applied=applied.append)

    ticket = sequencer.dispatch("pending")
    await _tick()
    await sequencer.aclose()

    assert ticket.state is TicketState.CANCELED
    assert fetch.tokens[0].is_canceled
    assert applied == []
