"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_BACKOFF_S = 2.0
DEFAULT_DEADLINE_S = 120.0
DEFAULT_MAX_TOTAL_BYTES = 10 * 1024 * 1024


def _env_float(env: Mapping[str, str], name: str, default: float, minimum: float, inclusive: bool = True) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value < minimum or (not inclusive and value == minimum):
        bound = ">=" if inclusive else ">"
        raise ValueError(f"{name} must be {bound} {minimum}, got {value}")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_backoff_s: float = DEFAULT_INITIAL_BACKOFF_S
    deadline_s: float = DEFAULT_DEADLINE_S
    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        source = os.environ if env is None else env
        return cls(
            api_key=source.get("GEMINI_API_KEY") or source.get("API_KEY") or None,
            model=source.get("ADREPORT_MODEL") or DEFAULT_MODEL,
            max_attempts=_env_int(source, "ADREPORT_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, minimum=1),
            initial_backoff_s=_env_float(source, "ADREPORT_INITIAL_BACKOFF_S", DEFAULT_INITIAL_BACKOFF_S, minimum=0.0),
            deadline_s=_env_float(source, "ADREPORT_DEADLINE_S", DEFAULT_DEADLINE_S, minimum=0.0, inclusive=False),
            max_total_bytes=_env_int(source, "ADREPORT_MAX_TOTAL_BYTES", DEFAULT_MAX_TOTAL_BYTES, minimum=1),
        )
