"""Resolve a ProbeConfiguration from the process environment.

Required variables: LDAP_ADDR, BIND_USER, BIND_PASSWORD, BASE_DN.
Optional variables fall back to their defaults when unset or empty.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional

from pydantic import ValidationError

from libs.common.search_attributes import parse_attributes_list
from .schema import (
    DEFAULT_LDAP_PORT,
    DEFAULT_METRICS_PORT,
    DEFAULT_PROBE_INTERVAL_SECONDS,
    DEFAULT_SEARCH_ATTRIBUTES,
    DEFAULT_SEARCH_FILTER,
    ProbeConfiguration,
)

logger = logging.getLogger(__name__)

REQUIRED_VARIABLES = ("BIND_USER", "BIND_PASSWORD", "LDAP_ADDR", "BASE_DN")


class ConfigurationError(ValueError):
    """Raised when the environment does not describe a usable probe."""


def load_env_file(path: Path, environ: Optional[MutableMapping[str, str]] = None) -> bool:
    """Load KEY=VALUE lines from ``path`` without overriding existing keys.

    Returns True if the file existed.
    """
    target = os.environ if environ is None else environ
    if not path.exists():
        return False
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key and key not in target:
            target[key] = value.strip()
    return True


def _get_default(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key, "")
    return value if value != "" else default


def load_configuration(environ: Optional[Mapping[str, str]] = None) -> ProbeConfiguration:
    """Build the probe configuration from ``environ`` (defaults to os.environ)."""
    env = os.environ if environ is None else environ

    for key in REQUIRED_VARIABLES:
        if not env.get(key):
            raise ConfigurationError(f"{key} variable is undefined or is empty")

    search_attributes = parse_attributes_list(
        _get_default(env, "SEARCH_ATTRIBUTES", DEFAULT_SEARCH_ATTRIBUTES)
    )
    logger.info(
        "Search attributes resolved",
        extra={"context": {"search_attributes": search_attributes}},
    )

    values: Dict[str, object] = {
        "ldap_addr": env["LDAP_ADDR"],
        "ldap_port": _get_default(env, "LDAP_PORT", str(DEFAULT_LDAP_PORT)),
        "ldap_scheme": _get_default(env, "LDAP_SCHEME", "ldap").lower(),
        "bind_user": env["BIND_USER"],
        "bind_password": env["BIND_PASSWORD"],
        "base_dn": env["BASE_DN"],
        "search_filter": _get_default(env, "SEARCH_FILTER", DEFAULT_SEARCH_FILTER),
        "search_attributes": search_attributes,
        "probe_interval_seconds": _get_default(
            env, "PROBE_INTERVAL_SECONDS", str(DEFAULT_PROBE_INTERVAL_SECONDS)
        ),
        "metrics_port": _get_default(env, "METRICS_PORT", str(DEFAULT_METRICS_PORT)),
        "log_level": _get_default(env, "LOG_LEVEL", "INFO"),
    }
    if env.get("PROBE_TIMEOUT_SECONDS"):
        values["probe_timeout_seconds"] = env["PROBE_TIMEOUT_SECONDS"]

    try:
        return ProbeConfiguration(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid probe configuration: {problems}") from exc


__all__ = ["ConfigurationError", "load_configuration", "load_env_file", "REQUIRED_VARIABLES"]
