from collections import namedtuple
from os import environ as os_environ

from dotenv import find_dotenv, load_dotenv

from pve_cluster_exporter.errors import ConfigError


Settings = namedtuple("Settings", [
    "host",
    "port",
    "username",
    "password",
    "token_name",
    "token_value",
    "verify_ssl",
    "listen_port",
    "bind_address",
    "collect_timeout",
    "coalesce_fetches",
    "log_level",
])

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _get_int(env, key, default):
    raw = env.get(key, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


def _get_float(env, key, default):
    raw = env.get(key, default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value


def _get_bool(env, key, default):
    raw = env.get(key, default).strip().lower()
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


def _get_log_level(env, key, default):
    level = env.get(key, default).strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"{key} must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level


def load_settings(environ=None):
    """Read settings from the environment.

    When ``environ`` is omitted a ``.env`` file in the working directory is
    loaded first, then the process environment is used.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os_environ

    return Settings(
        host=environ.get("PROXMOX_HOST", "127.0.0.1"),
        port=_get_int(environ, "PROXMOX_PORT", "8006"),
        username=environ.get("PROXMOX_USERNAME", "root@pam"),
        password=environ.get("PROXMOX_PASSWORD", ""),
        token_name=environ.get("PROXMOX_TOKEN_NAME", ""),
        token_value=environ.get("PROXMOX_TOKEN_VALUE", ""),
        verify_ssl=_get_bool(environ, "PROXMOX_VERIFY_SSL", "false"),
        listen_port=_get_int(environ, "PORT", "9876"),
        bind_address=environ.get("BIND_ADDRESS", "0.0.0.0"),
        collect_timeout=_get_float(environ, "COLLECT_TIMEOUT", "10"),
        coalesce_fetches=_get_bool(environ, "COALESCE_FETCHES", "false"),
        log_level=_get_log_level(environ, "LOG_LEVEL", "INFO"),
    )
