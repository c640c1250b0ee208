"""Configuration schema for the LDAP probe."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_LDAP_PORT = 389
DEFAULT_SEARCH_FILTER = "(&(objectclass=*))"
DEFAULT_SEARCH_ATTRIBUTES = "cn dn"
DEFAULT_PROBE_INTERVAL_SECONDS = 10.0
DEFAULT_METRICS_PORT = 2112


class ProbeConfiguration(BaseModel):
    """Resolved operating parameters, shared read-only by every probe cycle."""

    model_config = ConfigDict(frozen=True)

    ldap_addr: str
    ldap_port: int = Field(default=DEFAULT_LDAP_PORT, gt=0, le=65535)
    ldap_scheme: Literal["ldap", "ldaps"] = "ldap"
    bind_user: str
    bind_password: SecretStr
    base_dn: str
    search_filter: str = DEFAULT_SEARCH_FILTER
    search_attributes: List[str] = Field(default_factory=lambda: ["cn", "dn"])
    probe_interval_seconds: float = Field(default=DEFAULT_PROBE_INTERVAL_SECONDS, gt=0)
    # None means "same as the probe interval"
    probe_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    metrics_port: int = Field(default=DEFAULT_METRICS_PORT, gt=0, le=65535)
    log_level: str = "INFO"

    @field_validator("ldap_addr", "bind_user", "base_dn")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("bind_password")
    @classmethod
    def validate_password(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def phase_timeout_seconds(self) -> float:
        if self.probe_timeout_seconds is None:
            return self.probe_interval_seconds
        return self.probe_timeout_seconds

    @property
    def ldap_url(self) -> str:
        return f"{self.ldap_scheme}://{self.ldap_addr}:{self.ldap_port}"


__all__ = [
    "ProbeConfiguration",
    "DEFAULT_LDAP_PORT",
    "DEFAULT_SEARCH_FILTER",
    "DEFAULT_SEARCH_ATTRIBUTES",
    "DEFAULT_PROBE_INTERVAL_SECONDS",
    "DEFAULT_METRICS_PORT",
]
