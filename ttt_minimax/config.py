"""
Settings for the game server and client.

Read once from the environment (TTT_* variables) with built-in defaults;
command line flags in the entry points override these.
"""
from dataclasses import dataclass
import os
from typing import Any, Callable, Mapping, Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9999
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get(env: Mapping[str, str], name: str, default: Any,
         cast: Optional[Callable[[Any], Any]] = None) -> Any:
    val = env.get(name)
    if val is None or val == "":
        return default
    try:
        return cast(val) if cast else val
    except ValueError as e:
        raise ValueError(f"bad value for {name}: {val!r}") from e


def _port(val) -> int:
    port = int(val)
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range: {port}")
    return port


def _level(val) -> str:
    name = str(val).upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"unknown log level {val!r}")
    return name


@dataclass(frozen=True)
class Settings:
    # where the server listens / the client connects
    host: str
    port: int

    log_level: str

    # seconds between accept() polls, so stop() is noticed
    accept_timeout_s: float
    connect_timeout_s: float


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        host=_get(env, "TTT_HOST", DEFAULT_HOST),
        port=_get(env, "TTT_PORT", DEFAULT_PORT, cast=_port),
        log_level=_get(env, "TTT_LOG_LEVEL", "INFO", cast=_level),
        accept_timeout_s=_get(env, "TTT_ACCEPT_TIMEOUT_S", 1.0, cast=float),
        connect_timeout_s=_get(env, "TTT_CONNECT_TIMEOUT_S", 10.0, cast=float),
    )


SETTINGS = load_settings()
