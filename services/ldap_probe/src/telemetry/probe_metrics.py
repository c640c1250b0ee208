"""Prometheus gauges holding the latest probe measurements."""

from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

from services.ldap_probe.src.probe.result import ProbePhase, ProbeResult

GAUGE_NAMES = {
    ProbePhase.CONNECT: "ldap_connection_delay",
    ProbePhase.BIND: "ldap_bind_delay",
    ProbePhase.SEARCH: "ldap_search_delay",
}


class ProbeMetrics:
    """Metrics sink for the probe.

    Owns its registry, so several instances can coexist (tests, embedding).
    ``publish`` and ``render`` share one lock: a scrape sees either the
    previous cycle or the current one, never a mix.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._lock = threading.Lock()

        self.connection_delay = Gauge(
            GAUGE_NAMES[ProbePhase.CONNECT],
            "LDAP connection delay milliseconds",
            registry=self.registry,
        )
        self.bind_delay = Gauge(
            GAUGE_NAMES[ProbePhase.BIND],
            "LDAP bind delay milliseconds",
            registry=self.registry,
        )
        self.search_delay = Gauge(
            GAUGE_NAMES[ProbePhase.SEARCH],
            "LDAP search request delay milliseconds",
            registry=self.registry,
        )
        self.failures = Counter(
            "ldap_probe_failures",
            "LDAP probe cycles that ended with a phase failure",
            ["phase"],
            registry=self.registry,
        )
        self.cycles = Counter(
            "ldap_probe_cycles",
            "LDAP probe cycles executed",
            registry=self.registry,
        )
        for phase in ProbePhase:
            self.failures.labels(phase=phase.value)

        self._gauges: Dict[ProbePhase, Gauge] = {
            ProbePhase.CONNECT: self.connection_delay,
            ProbePhase.BIND: self.bind_delay,
            ProbePhase.SEARCH: self.search_delay,
        }

    def set_connection_delay(self, value_ms: float) -> None:
        self.connection_delay.set(value_ms)

    def set_bind_delay(self, value_ms: float) -> None:
        self.bind_delay.set(value_ms)

    def set_search_delay(self, value_ms: float) -> None:
        self.search_delay.set(value_ms)

    def publish(self, result: ProbeResult) -> None:
        """Write the durations a cycle produced; skipped phases keep their value."""
        with self._lock:
            for phase in ProbePhase:
                value = result.duration(phase)
                if value is not None:
                    self._gauges[phase].set(value)
            if result.failure is not None:
                self.failures.labels(phase=result.failure.phase.value).inc()
            self.cycles.inc()

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return {
                phase.value: self.registry.get_sample_value(name)
                for phase, name in GAUGE_NAMES.items()
            }

    def render(self) -> Tuple[bytes, str]:
        """Return the text exposition and its content type."""
        with self._lock:
            return generate_latest(self.registry), CONTENT_TYPE_LATEST


__all__ = ["ProbeMetrics", "GAUGE_NAMES"]
