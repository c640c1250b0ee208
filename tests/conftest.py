import pytest

from libs.common.config import ProbeConfiguration


@pytest.fixture
def probe_config() -> ProbeConfiguration:
    return ProbeConfiguration(
        ldap_addr="ldap.example.org",
        bind_user="cn=admin,dc=example,dc=org",
        bind_password="s3cret",
        base_dn="dc=example,dc=org",
        search_attributes=["cn", "dn"],
        probe_interval_seconds=10,
    )
