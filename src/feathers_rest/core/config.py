from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class RestConfig:
    base_url: str
    auth_header: str = "Authorization"
    auth_path: str = "/authentication"
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_env_config(*, use_dotenv: bool = True) -> RestConfig:
    """Load provider settings from environment (optional .env)."""
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    return RestConfig(
        base_url=os.getenv("FEATHERS_BASE_URL", "").strip(),
        auth_header=os.getenv("FEATHERS_AUTH_HEADER", "").strip() or "Authorization",
        auth_path=os.getenv("FEATHERS_AUTH_PATH", "").strip() or "/authentication",
        timeout_seconds=_get_float_env(
            "FEATHERS_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        ),
    )


__all__ = ["RestConfig", "load_env_config", "DEFAULT_TIMEOUT_SECONDS"]
