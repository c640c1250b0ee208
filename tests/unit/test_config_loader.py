import pytest

from libs.common.config import ConfigurationError, ProbeConfiguration, load_configuration, load_env_file

REQUIRED = {
    "LDAP_ADDR": "ldap.example.org",
    "BIND_USER": "cn=admin,dc=example,dc=org",
    "BIND_PASSWORD": "s3cret",
    "BASE_DN": "dc=example,dc=org",
}


def test_defaults_applied():
    cfg = load_configuration(dict(REQUIRED))
    assert cfg.ldap_port == 389
    assert cfg.search_filter == "(&(objectclass=*))"
    assert cfg.search_attributes == ["cn", "dn"]
    assert cfg.ldap_url == "ldap://ldap.example.org:389"
    assert cfg.probe_interval_seconds == 10
    assert cfg.phase_timeout_seconds == 10
    assert cfg.metrics_port == 2112
    assert cfg.bind_password.get_secret_value() == "s3cret"


def test_overrides_are_parsed():
    env = dict(
        REQUIRED,
        LDAP_PORT="636",
        LDAP_SCHEME="LDAPS",
        SEARCH_FILTER="(uid=probe)",
        SEARCH_ATTRIBUTES=" uid  mail ",
        PROBE_INTERVAL_SECONDS="30",
        PROBE_TIMEOUT_SECONDS="5",
        LOG_LEVEL="debug",
    )
    cfg = load_configuration(env)
    assert cfg.ldap_url == "ldaps://ldap.example.org:636"
    assert cfg.search_filter == "(uid=probe)"
    assert cfg.search_attributes == ["uid", "mail"]
    assert cfg.probe_interval_seconds == 30
    assert cfg.phase_timeout_seconds == 5
    assert cfg.log_level == "DEBUG"


def test_empty_optional_values_fall_back_to_defaults():
    env = dict(REQUIRED, LDAP_PORT="", SEARCH_FILTER="", SEARCH_ATTRIBUTES="")
    cfg = load_configuration(env)
    assert cfg.ldap_port == 389
    assert cfg.search_filter == "(&(objectclass=*))"
    assert cfg.search_attributes == ["cn", "dn"]


@pytest.mark.parametrize("missing", sorted(REQUIRED))
def test_missing_required_variable_is_fatal(missing):
    env = dict(REQUIRED)
    del env[missing]
    with pytest.raises(ConfigurationError, match=missing):
        load_configuration(env)


@pytest.mark.parametrize("empty", sorted(REQUIRED))
def test_empty_required_variable_is_fatal(empty):
    env = dict(REQUIRED, **{empty: ""})
    with pytest.raises(ConfigurationError, match="undefined or is empty"):
        load_configuration(env)


def test_invalid_port_is_reported():
    with pytest.raises(ConfigurationError, match="ldap_port"):
        load_configuration(dict(REQUIRED, LDAP_PORT="not-a-port"))


def test_non_positive_interval_is_reported():
    with pytest.raises(ConfigurationError, match="probe_interval_seconds"):
        load_configuration(dict(REQUIRED, PROBE_INTERVAL_SECONDS="0"))


def test_configuration_is_immutable():
    cfg = load_configuration(dict(REQUIRED))
    with pytest.raises(Exception):
        cfg.base_dn = "dc=other"


def test_blank_address_rejected_by_model():
    with pytest.raises(ValueError):
        ProbeConfiguration(ldap_addr="   ", bind_user="u", bind_password="p", base_dn="dc=x")


def test_env_file_does_not_override_existing(tmp_path):
    env_file = tmp_path / ".env.dev"
    env_file.write_text("# comment\nLDAP_ADDR=from-file\nBASE_DN = dc=file\n\nnot a pair\n")
    environ = {"LDAP_ADDR": "from-env"}

    assert load_env_file(env_file, environ) is True
    assert environ == {"LDAP_ADDR": "from-env", "BASE_DN": "dc=file"}


def test_missing_env_file_is_ignored(tmp_path):
    environ = {}
    assert load_env_file(tmp_path / "absent", environ) is False
    assert environ == {}
