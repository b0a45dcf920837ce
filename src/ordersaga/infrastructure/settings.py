"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from ordersaga.domain.exceptions import ValidationError

ENV_PREFIX = "ORDERSAGA_"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    inventory_url: str | None = None
    inventory_timeout: float = 5.0
    compensation_attempts: int = 3
    compensation_backoff: float = 0.2

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value and value.strip() else None

        defaults = Settings()
        return Settings(
            data_dir=Path(get("DATA_DIR") or defaults.data_dir),
            inventory_url=(get("INVENTORY_URL") or "").rstrip("/") or None,
            inventory_timeout=_number(
                "INVENTORY_TIMEOUT",
                get("INVENTORY_TIMEOUT"),
                float,
                defaults.inventory_timeout,
                0.001,
            ),
            compensation_attempts=_number(
                "COMPENSATION_ATTEMPTS",
                get("COMPENSATION_ATTEMPTS"),
                int,
                defaults.compensation_attempts,
                1,
            ),
            compensation_backoff=_number(
                "COMPENSATION_BACKOFF",
                get("COMPENSATION_BACKOFF"),
                float,
                defaults.compensation_backoff,
                0,
            ),
        )


def _number(name, raw, kind, default, minimum):
    if raw is None:
        return default
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ValidationError(f"{ENV_PREFIX}{name} must be a {kind.__name__}, got {raw!r}") from exc
    if value < minimum:
        raise ValidationError(f"{ENV_PREFIX}{name} must be at least {minimum}, got {raw!r}")
    return value
