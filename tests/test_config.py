import pytest

from pve_cluster_exporter.config import load_settings
from pve_cluster_exporter.errors import ConfigError


def test_defaults():
    settings = load_settings({})

    assert settings.host == "127.0.0.1"
    assert settings.port == 8006
    assert settings.username == "root@pam"
    assert settings.password == ""
    assert settings.verify_ssl is False
    assert settings.listen_port == 9876
    assert settings.bind_address == "0.0.0.0"
    assert settings.collect_timeout == 10.0
    assert settings.coalesce_fetches is False
    assert settings.log_level == "INFO"


def test_overrides():
    settings = load_settings({
        "PROXMOX_HOST": "pve.example.org",
        "PROXMOX_PORT": "443",
        "PROXMOX_USERNAME": "monitor@pve",
        "PROXMOX_PASSWORD": "secret",
        "PROXMOX_TOKEN_NAME": "exporter",
        "PROXMOX_TOKEN_VALUE": "uuid",
        "PROXMOX_VERIFY_SSL": "yes",
        "PORT": "9221",
        "COLLECT_TIMEOUT": "2.5",
        "COALESCE_FETCHES": "True",
        "LOG_LEVEL": "debug",
    })

    assert settings.host == "pve.example.org"
    assert settings.port == 443
    assert settings.username == "monitor@pve"
    assert settings.token_name == "exporter"
    assert settings.verify_ssl is True
    assert settings.listen_port == 9221
    assert settings.collect_timeout == 2.5
    assert settings.coalesce_fetches is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("env", [
    {"PROXMOX_PORT": "https"},
    {"PORT": ""},
    {"COLLECT_TIMEOUT": "soon"},
    {"COLLECT_TIMEOUT": "0"},
    {"PROXMOX_VERIFY_SSL": "maybe"},
    {"LOG_LEVEL": "getLogger"},
    {"LOG_LEVEL": "verbose"},
])
def test_invalid_values(env):
    with pytest.raises(ConfigError):
        load_settings(env)


def test_reads_process_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PROXMOX_HOST", "10.0.0.5")
    monkeypatch.setenv("PORT", "9000")

    settings = load_settings()

    assert settings.host == "10.0.0.5"
    assert settings.listen_port == 9000


def test_reads_dotenv_from_working_directory(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text("PROXMOX_HOST=10.9.9.9\nCOALESCE_FETCHES=on\n")
    monkeypatch.chdir(tmp_path)
    # values loaded from .env land in os.environ; have monkeypatch restore them
    for key in ("PROXMOX_HOST", "COALESCE_FETCHES"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)

    settings = load_settings()

    assert settings.host == "10.9.9.9"
    assert settings.coalesce_fetches is True


def test_log_level_is_normalised():
    assert load_settings({"LOG_LEVEL": " warning "}).log_level == "WARNING"
