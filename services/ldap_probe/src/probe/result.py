"""Data types produced by one probe cycle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ProbePhase(str, Enum):
    """Probe phases, in execution order."""
    CONNECT = "connect"
    BIND = "bind"
    SEARCH = "search"


@dataclass(frozen=True)
class PhaseFailure:
    """A phase that raised instead of completing."""
    phase: ProbePhase
    error_type: str
    error: str
    elapsed_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "error_type": self.error_type,
            "error": self.error,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass
class ProbeResult:
    """Durations measured by one cycle, in milliseconds.

    A phase that ran to completion has a duration whether it succeeded or
    failed. A duration is None only for phases never attempted because an
    earlier phase failed.
    """
    connection_ms: Optional[float] = None
    bind_ms: Optional[float] = None
    search_ms: Optional[float] = None
    entries: int = 0
    failure: Optional[PhaseFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def duration(self, phase: ProbePhase) -> Optional[float]:
        return {
            ProbePhase.CONNECT: self.connection_ms,
            ProbePhase.BIND: self.bind_ms,
            ProbePhase.SEARCH: self.search_ms,
        }[phase]

    def record(self, phase: ProbePhase, value_ms: float) -> None:
        if phase is ProbePhase.CONNECT:
            self.connection_ms = value_ms
        elif phase is ProbePhase.BIND:
            self.bind_ms = value_ms
        else:
            self.search_ms = value_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connection_ms": self.connection_ms,
            "bind_ms": self.bind_ms,
            "search_ms": self.search_ms,
            "entries": self.entries,
            "failure": self.failure.to_dict() if self.failure else None,
        }


__all__ = ["ProbePhase", "PhaseFailure", "ProbeResult"]
