import pytest

from stackclient.config import settings
from stackclient.config.settings import SdkConfig, _load_secret_from_file, load_settings
from stackclient.exceptions import ConfigurationError


@pytest.fixture()
def no_run_secrets(monkeypatch, tmp_path):
    """Point /run/secrets at an empty temp directory."""
    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_defaults():
    cfg = SdkConfig()
    assert cfg.transport == "requests"
    assert cfg.transport_options() == {"timeout": 0, "ssl_verify": True, "debug": False}
    assert cfg.has_credentials is False


def test_from_mapping_uses_flat_keys():
    cfg = SdkConfig.from_mapping({
        "endpoint": "https://identity.example.com:5000",
        "username": "alice",
        "password": "secret",
        "tenantid": "t-1",
        "tenantname": "demo",
        "transport": "mock",
        "transport.timeout": "30",
        "transport.ssl_verify": "false",
        "transport.debug": "yes",
        "transport.proxy": "http://proxy:3128",
        "unrelated": "ignored",
    })
    assert cfg.endpoint == "https://identity.example.com:5000"
    assert cfg.tenant_id == "t-1"
    assert cfg.tenant_name == "demo"
    assert cfg.has_credentials is True
    assert cfg.transport_options() == {
        "timeout": 30,
        "ssl_verify": False,
        "debug": True,
        "proxy": "http://proxy:3128",
    }


def test_ssl_verify_accepts_ca_bundle_path():
    cfg = SdkConfig.from_mapping({"transport.ssl_verify": "/etc/ssl/certs/ca.pem"})
    assert cfg.ssl_verify == "/etc/ssl/certs/ca.pem"


@pytest.mark.parametrize(
    "values",
    [
        {"transport.timeout": "soon"},
        {"transport.timeout": -5},
        {"transport.debug": "maybe"},
    ],
)
def test_invalid_values(values):
    with pytest.raises(ConfigurationError):
        SdkConfig.from_mapping(values)


def test_load_settings_from_environment(no_run_secrets):
    cfg = load_settings({
        "STACK_ENDPOINT": "https://identity.example.com",
        "STACK_USERNAME": "alice",
        "STACK_PASSWORD": "from-env",
        "STACK_TENANT_NAME": "demo",
        "STACK_TRANSPORT_TIMEOUT": "2.5",
        "STACK_TRANSPORT_DEBUG": "true",
    })
    assert cfg.endpoint == "https://identity.example.com"
    assert cfg.password == "from-env"
    assert cfg.tenant_id is None
    assert cfg.tenant_name == "demo"
    assert cfg.timeout == 2.5
    assert cfg.debug is True
    assert cfg.ssl_verify is True
    assert cfg.proxy is None


def test_load_settings_prefers_run_secrets(no_run_secrets):
    (no_run_secrets / "stack_password").write_text("file-secret\n")
    cfg = load_settings({"STACK_PASSWORD": "from-env"})
    assert cfg.password == "file-secret"


def test_load_settings_reads_os_environ(monkeypatch, no_run_secrets):
    monkeypatch.setenv("STACK_ENDPOINT", "https://env.example.com")
    monkeypatch.setenv("STACK_TRANSPORT", "mock")
    cfg = load_settings()
    assert cfg.endpoint == "https://env.example.com"
    assert cfg.transport == "mock"


def test_secret_falls_back_to_env(monkeypatch, no_run_secrets):
    monkeypatch.setenv("SAMPLE_SECRET", "env-secret")
    assert _load_secret_from_file("sample_secret", "SAMPLE_SECRET") == "env-secret"


def test_secret_missing(monkeypatch, no_run_secrets):
    monkeypatch.delenv("SAMPLE_SECRET", raising=False)
    assert _load_secret_from_file("sample_secret", "SAMPLE_SECRET") is None


def test_secret_fallback_reads_given_environ(monkeypatch, no_run_secrets):
    monkeypatch.setenv("SAMPLE_SECRET", "process-secret")
    assert _load_secret_from_file("sample_secret", "SAMPLE_SECRET", {"SAMPLE_SECRET": "mapped"}) == "mapped"
    assert _load_secret_from_file("sample_secret", "SAMPLE_SECRET", {}) is None


def test_load_settings_password_ignores_process_env_when_environ_given(monkeypatch, no_run_secrets):
    monkeypatch.setenv("STACK_PASSWORD", "process-secret")
    assert load_settings({"STACK_USERNAME": "alice"}).password == ""
    assert load_settings({"STACK_PASSWORD": "mapped"}).password == "mapped"


def test_load_settings_empty_secret_file_falls_back_to_env(no_run_secrets):
    (no_run_secrets / "stack_password").write_text("  \n")
    assert load_settings({"STACK_PASSWORD": "from-env"}).password == "from-env"
