"""Outcome type returned by best-effort side effects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

NOT_CONFIGURED = "not configured"


@dataclass(frozen=True)
class DispatchResult:
    ok: bool
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        """True when the integration is switched off rather than broken."""
        return not self.ok and self.error == NOT_CONFIGURED

    @classmethod
    def success(cls) -> "DispatchResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "DispatchResult":
        return cls(ok=False, error=error)

    @classmethod
    def not_configured(cls) -> "DispatchResult":
        return cls(ok=False, error=NOT_CONFIGURED)
