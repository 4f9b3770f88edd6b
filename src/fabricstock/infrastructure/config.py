"""Runtime settings, read from ``FABRICSTOCK_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from fabricstock.domain.exceptions import ValidationError
from fabricstock.domain.model.value_objects import Meters

ENV_PREFIX = "FABRICSTOCK_"

# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    database_url: str = f"sqlite:///{_DATA_DIR / 'fabricstock.db'}"
    log_level: str = "INFO"
    low_stock_threshold: Meters = Meters.of("10")
    sqlite_busy_timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from the environment, falling back to defaults.

        ``FABRICSTOCK_DATABASE_URL`` -> ``database_url`` and so on; unknown
        ``FABRICSTOCK_*`` variables are ignored.
        """
        environ = os.environ if environ is None else environ
        raw: dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                raw[key[len(ENV_PREFIX):].lower()] = value

        defaults = cls()
        try:
            busy_timeout = float(raw.get("sqlite_busy_timeout", defaults.sqlite_busy_timeout))
        except ValueError:
            raise ValidationError(
                f"{ENV_PREFIX}SQLITE_BUSY_TIMEOUT must be a number of seconds"
            ) from None

        return cls(
            database_url=raw.get("database_url", defaults.database_url),
            log_level=raw.get("log_level", defaults.log_level).upper(),
            low_stock_threshold=(
                Meters.of(raw["low_stock_threshold"])
                if "low_stock_threshold" in raw
                else defaults.low_stock_threshold
            ),
            sqlite_busy_timeout=busy_timeout,
        )
