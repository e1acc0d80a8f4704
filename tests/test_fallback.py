"""Tests for the sequential fallback orchestrator."""

import asyncio

import httpx
import pytest

from griot.errors import (
    FailureKind,
    FallbackExhausted,
    ProviderFailure,
    ProviderNetworkError,
)
from griot.orchestrator.fallback import Strategy, first_success, run_fallback
from griot.providers.base import ProviderResponse


class CountingCall:
    """Deferred provider call that records how often it ran."""

    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def _strategy(name, call, **kwargs):
    return Strategy(name=name, call=call, **kwargs)


class TestOrdering:
    async def test_third_strategy_wins_after_two_failures(self):
        first = CountingCall(ProviderResponse(status_code=500, text="edit model missing"))
        second = CountingCall(error=ProviderFailure("alternate edit rejected", 400))
        third = CountingCall(ProviderResponse(status_code=200, payload={"value": "third"}))

        outcome = await run_fallback(
            [
                _strategy("first", first),
                _strategy("second", second),
                _strategy("third", third, normalize=lambda raw: raw.payload["value"]),
            ]
        )

        assert outcome.value == "third"
        assert outcome.strategy == "third"
        assert first.calls == 1
        assert second.calls == 1
        assert third.calls == 1
        assert [f.strategy for f in outcome.failures] == ["first", "second"]

    async def test_stops_at_first_success(self):
        first = CountingCall(ProviderResponse(status_code=200, payload={"ok": True}))
        second = CountingCall(ProviderResponse(status_code=200, payload={"ok": True}))

        outcome = await run_fallback([_strategy("a", first), _strategy("b", second)])

        assert outcome.strategy == "a"
        assert outcome.failures == []
        assert second.calls == 0

    async def test_predicate_failure_moves_on(self):
        missing_field = CountingCall(ProviderResponse(status_code=200, payload={"data": []}))
        good = CountingCall(ProviderResponse(status_code=200, payload={"data": [1]}))

        def has_data(raw):
            return raw.ok and bool(raw.payload["data"])

        outcome = await run_fallback(
            [
                _strategy("empty", missing_field, accept=has_data),
                _strategy("full", good, accept=has_data),
            ]
        )

        assert outcome.strategy == "full"
        assert outcome.failures[0].detail == "response missing expected result field"
        assert outcome.failures[0].status_code == 200

    async def test_empty_plan_is_rejected(self):
        with pytest.raises(ValueError):
            await run_fallback([])


class TestExhaustion:
    async def test_aggregated_failure_names_every_attempt(self):
        plan = [
            _strategy("edit", CountingCall(ProviderResponse(status_code=404, text="no edit endpoint"))),
            _strategy("alt-edit", CountingCall(error=ProviderFailure("model grok-x unknown"))),
            _strategy("regen", CountingCall(ProviderResponse(status_code=503, text="generator overloaded"))),
        ]

        with pytest.raises(FallbackExhausted) as excinfo:
            await run_fallback(plan)

        message = excinfo.value.message
        assert "no edit endpoint" in message
        assert "model grok-x unknown" in message
        assert "generator overloaded" in message
        assert len(excinfo.value.failures) == 3
        assert excinfo.value.upstream_status == 503
        assert excinfo.value.kind == FailureKind.PROVIDER

    async def test_terminal_kind_comes_from_last_attempt(self):
        plan = [
            _strategy("a", CountingCall(ProviderResponse(status_code=500, text="boom"))),
            _strategy("b", CountingCall(error=ProviderNetworkError("connection reset"))),
        ]

        with pytest.raises(FallbackExhausted) as excinfo:
            await run_fallback(plan)

        assert excinfo.value.kind == FailureKind.NETWORK

    async def test_httpx_transport_error_is_a_network_failure(self):
        error = httpx.ConnectError("dns failure")
        with pytest.raises(FallbackExhausted) as excinfo:
            await run_fallback([_strategy("a", CountingCall(error=error))])

        assert excinfo.value.kind == FailureKind.NETWORK
        assert "dns failure" in excinfo.value.message

    async def test_other_httpx_errors_move_on_to_the_next_strategy(self):
        redirects = CountingCall(error=httpx.TooManyRedirects("Exceeded maximum allowed redirects."))
        backup = CountingCall(ProviderResponse(status_code=200, payload={"v": 1}))

        outcome = await run_fallback([_strategy("a", redirects), _strategy("b", backup)])

        assert outcome.strategy == "b"
        assert outcome.failures[0].kind == FailureKind.PROVIDER
        assert "redirects" in outcome.failures[0].detail

    async def test_nested_exhaustion_keeps_inner_details(self):
        async def inner_chain():
            await first_success(
                [
                    _strategy("vision:a", CountingCall(ProviderResponse(status_code=404, text="vision a gone"))),
                    _strategy("vision:b", CountingCall(ProviderResponse(status_code=404, text="vision b gone"))),
                ]
            )

        with pytest.raises(FallbackExhausted) as excinfo:
            await run_fallback([_strategy("caption", inner_chain)])

        failure = excinfo.value.failures[0]
        assert failure.strategy == "caption"
        assert "vision a gone" in failure.detail
        assert "vision b gone" in failure.detail


class TestTimeout:
    async def test_hung_call_is_cancelled_and_treated_as_failure(self):
        hung = CountingCall(ProviderResponse(status_code=200), delay=10)
        fallback = CountingCall(ProviderResponse(status_code=200, payload={"v": 1}))

        outcome = await run_fallback(
            [
                _strategy("slow", hung, timeout=0.05),
                _strategy("fast", fallback, timeout=0.05),
            ]
        )

        assert outcome.strategy == "fast"
        assert outcome.failures[0].kind == FailureKind.TIMEOUT
        assert hung.calls == 1

    async def test_terminal_timeout_is_reported(self):
        hung = CountingCall(delay=10)

        with pytest.raises(FallbackExhausted) as excinfo:
            await run_fallback([_strategy("slow", hung, timeout=0.05)])

        assert excinfo.value.kind == FailureKind.TIMEOUT
        assert "timed out" in excinfo.value.message

    async def test_timeout_raised_by_call_without_deadline(self):
        with pytest.raises(FallbackExhausted) as excinfo:
            await run_fallback([_strategy("a", CountingCall(error=asyncio.TimeoutError()))])

        assert excinfo.value.kind == FailureKind.TIMEOUT
        assert excinfo.value.failures[0].detail == "timed out"
