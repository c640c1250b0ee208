"""Configuration schema and environment loading for the LDAP probe."""

from .loader import ConfigurationError, load_configuration, load_env_file
from .schema import ProbeConfiguration

__all__ = ["ProbeConfiguration", "ConfigurationError", "load_configuration", "load_env_file"]
