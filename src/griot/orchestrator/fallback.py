"""Sequential fallback execution over an ordered list of strategies.

A :class:`Strategy` is one concrete attempt at a capability (a provider,
a model and a payload) held as a deferred call.  :func:`run_fallback`
awaits each strategy in order, exactly once, and returns the first result
whose raw response passes the strategy's success predicate.  Strategies
never run concurrently; a later strategy starts only once the previous
one has failed.

A failure is any of:

* the call raising a provider error (including transport errors),
* the call exceeding the strategy timeout, which cancels it,
* the raw response failing ``accept``.

Plans are built per request and are not reused.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

import httpx
import structlog

from griot.errors import (
    FailureKind,
    FallbackExhausted,
    ProviderFailure,
    StrategyFailure,
)
from griot.providers.base import ProviderResponse

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _response_ok(raw: Any) -> bool:
    if isinstance(raw, ProviderResponse):
        return raw.ok
    return raw is not None


def _identity(raw: Any) -> Any:
    return raw


def _describe_raw(raw: Any) -> str:
    if isinstance(raw, ProviderResponse):
        if raw.ok:
            return "response missing expected result field"
        return raw.describe()
    return "no result returned"


def _timeout_detail(timeout: float | None) -> str:
    if timeout is None:
        return "timed out"
    return f"timed out after {timeout:g}s"


def _status_of(raw: Any) -> int | None:
    if isinstance(raw, ProviderResponse):
        return raw.status_code
    return None


@dataclass
class Strategy(Generic[T]):
    """One deferred provider call plus how to judge and normalize it."""

    name: str
    call: Callable[[], Awaitable[Any]]
    accept: Callable[[Any], bool] = _response_ok
    normalize: Callable[[Any], T] = _identity
    describe_failure: Callable[[Any], str] = _describe_raw
    timeout: float | None = None


@dataclass
class FallbackOutcome(Generic[T]):
    """Normalized result of the winning strategy."""

    value: T
    strategy: str
    failures: list[StrategyFailure] = field(default_factory=list)


async def _invoke(strategy: Strategy[Any]) -> Any:
    if strategy.timeout is None:
        return await strategy.call()
    # wait_for cancels the pending call and clears its timer on every path
    return await asyncio.wait_for(strategy.call(), timeout=strategy.timeout)


async def run_fallback(strategies: Sequence[Strategy[T]]) -> FallbackOutcome[T]:
    """Run *strategies* in order and return the first success.

    Raises
    ------
    FallbackExhausted
        When every strategy failed.  The exception lists one
        :class:`StrategyFailure` per attempted strategy.
    """
    if not strategies:
        raise ValueError("a fallback plan needs at least one strategy")

    failures: list[StrategyFailure] = []

    for strategy in strategies:
        try:
            raw = await _invoke(strategy)
        except asyncio.TimeoutError:
            failure = StrategyFailure(
                strategy.name,
                _timeout_detail(strategy.timeout),
                FailureKind.TIMEOUT,
            )
        except FallbackExhausted as exc:
            failure = StrategyFailure(strategy.name, exc.message, exc.kind, exc.upstream_status)
        except ProviderFailure as exc:
            failure = StrategyFailure(strategy.name, exc.message, exc.kind, exc.upstream_status)
        except httpx.TimeoutException as exc:
            failure = StrategyFailure(strategy.name, str(exc) or "timed out", FailureKind.TIMEOUT)
        except httpx.TransportError as exc:
            failure = StrategyFailure(strategy.name, str(exc) or "network error", FailureKind.NETWORK)
        except httpx.HTTPError as exc:
            failure = StrategyFailure(strategy.name, str(exc) or exc.__class__.__name__, FailureKind.PROVIDER)
        else:
            if strategy.accept(raw):
                logger.info("strategy_succeeded", strategy=strategy.name, attempts=len(failures) + 1)
                return FallbackOutcome(
                    value=strategy.normalize(raw),
                    strategy=strategy.name,
                    failures=failures,
                )
            failure = StrategyFailure(
                strategy.name,
                strategy.describe_failure(raw),
                FailureKind.PROVIDER,
                _status_of(raw),
            )

        failures.append(failure)
        logger.warning(
            "strategy_failed",
            strategy=failure.strategy,
            kind=failure.kind.value,
            status=failure.status_code,
            detail=failure.detail[:300],
        )

    raise FallbackExhausted(failures)


async def first_success(strategies: Sequence[Strategy[T]]) -> FallbackOutcome[T]:
    """Probe an ordered list of alternatives and keep the first that works."""
    return await run_fallback(strategies)
