"""Probe executor: one connect -> bind -> search cycle against the directory.

Each phase is timed with a monotonic clock. A phase that raises ends the
cycle early; its elapsed time is still recorded as that phase's duration,
and later phases are never attempted. The session is closed on every exit
path once it exists.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Tuple

from libs.common.config import ProbeConfiguration
from services.ldap_probe.src.clients.ldap_client import DirectoryClient, DirectorySession
from services.ldap_probe.src.probe.result import PhaseFailure, ProbePhase, ProbeResult

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


class ProbePhaseError(Exception):
    """Wraps the exception raised by a probe phase."""

    def __init__(self, phase: ProbePhase, cause: BaseException, elapsed_ms: float) -> None:
        super().__init__(f"{phase.value} failed: {cause}")
        self.phase = phase
        self.cause = cause
        self.elapsed_ms = elapsed_ms

    def to_failure(self) -> PhaseFailure:
        return PhaseFailure(
            phase=self.phase,
            error_type=type(self.cause).__name__,
            error=str(self.cause),
            elapsed_ms=self.elapsed_ms,
        )


class ProbeExecutor:
    """Runs single probe cycles with a fixed configuration and client."""

    def __init__(self, config: ProbeConfiguration, client: DirectoryClient) -> None:
        self.config = config
        self.client = client

    def _timed(self, phase: ProbePhase, func: Callable[[], Any]) -> Tuple[Any, float]:
        started = time.perf_counter()
        try:
            value = func()
        except Exception as exc:
            raise ProbePhaseError(phase, exc, _elapsed_ms(started)) from exc
        return value, _elapsed_ms(started)

    def run(self) -> ProbeResult:
        """Execute one cycle. Phase failures are returned, never raised."""
        result = ProbeResult()
        session: Optional[DirectorySession] = None
        try:
            session, result.connection_ms = self._timed(
                ProbePhase.CONNECT, lambda: self.client.dial(self.config.ldap_url)
            )
            logger.info("Connect duration: %.3f ms", result.connection_ms)

            _, result.bind_ms = self._timed(
                ProbePhase.BIND,
                lambda: session.bind(
                    self.config.bind_user, self.config.bind_password.get_secret_value()
                ),
            )
            logger.info("Bind duration: %.3f ms", result.bind_ms)

            entries, result.search_ms = self._timed(
                ProbePhase.SEARCH,
                lambda: session.search(
                    self.config.base_dn,
                    self.config.search_filter,
                    self.config.search_attributes,
                ),
            )
            result.entries = len(entries)
            logger.info("Search duration: %.3f ms (%d entries)", result.search_ms, result.entries)
            self._log_entries(entries)
        except ProbePhaseError as exc:
            result.record(exc.phase, exc.elapsed_ms)
            result.failure = exc.to_failure()
            logger.error(
                "%s failure: %s",
                exc.phase.value.capitalize(),
                exc.cause,
                extra={"context": {"ldap_url": self.config.ldap_url, **result.failure.to_dict()}},
            )
        finally:
            if session is not None:
                self._close(session)
        return result

    def _close(self, session: DirectorySession) -> None:
        try:
            session.close()
        except Exception as exc:
            logger.warning(
                "Failed to close directory session: %s",
                exc,
                extra={"context": {"ldap_url": self.config.ldap_url, "error_type": type(exc).__name__}},
            )

    def _log_entries(self, entries: List[Any]) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        for entry in entries:
            attributes = getattr(entry, "entry_attributes_as_dict", {})
            logger.debug("%s: %s", getattr(entry, "entry_dn", entry), attributes.get("cn"))


__all__ = ["ProbeExecutor", "ProbePhaseError"]
