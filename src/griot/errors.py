"""Error taxonomy shared by the adapters, the orchestrator and the API.

Every error carries a plain-text ``message`` that is safe to show to the
visitor and the HTTP ``status_code`` the request handlers map it to.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class FailureKind(str, enum.Enum):
    """Why a single strategy attempt failed."""

    PROVIDER = "provider"
    TIMEOUT = "timeout"
    NETWORK = "network"


class GriotError(Exception):
    """Base class for errors the request handlers know how to render."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationMissing(GriotError):
    """A required provider credential is not configured."""

    status_code = 500

    def __init__(self, message: str, env_var: str) -> None:
        super().__init__(message)
        self.env_var = env_var


class ValidationFailure(GriotError):
    """Client input is missing, malformed or oversized."""

    status_code = 400


class ProviderFailure(GriotError):
    """A provider call returned non-2xx or lacked the expected result field."""

    status_code = 502
    kind = FailureKind.PROVIDER

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class ProviderTimeout(ProviderFailure):
    """A provider call exceeded its time budget and was cancelled."""

    status_code = 504
    kind = FailureKind.TIMEOUT


class ProviderNetworkError(ProviderFailure):
    """Transport-level failure (connection reset, DNS, TLS)."""

    status_code = 503
    kind = FailureKind.NETWORK


@dataclass(frozen=True)
class StrategyFailure:
    """Diagnostic record of one failed strategy attempt."""

    strategy: str
    detail: str
    kind: FailureKind = FailureKind.PROVIDER
    status_code: int | None = None

    def describe(self) -> str:
        return f"{self.strategy}: {self.detail}"


class FallbackExhausted(GriotError):
    """Every strategy in a fallback chain failed."""

    status_code = 502

    def __init__(self, failures: list[StrategyFailure]) -> None:
        self.failures = list(failures)
        message = "; ".join(f.describe() for f in self.failures) or "no strategies attempted"
        super().__init__(message)

    @property
    def terminal(self) -> StrategyFailure | None:
        """The failure of the last strategy attempted."""
        return self.failures[-1] if self.failures else None

    @property
    def kind(self) -> FailureKind:
        terminal = self.terminal
        return terminal.kind if terminal else FailureKind.PROVIDER

    @property
    def upstream_status(self) -> int | None:
        terminal = self.terminal
        return terminal.status_code if terminal else None
