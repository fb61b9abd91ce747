"""Environment-driven settings for the installment engine.

Settings are read once from environment variables and cached, so every layer
(validator, CLI, web app) sees the same limits. Call :func:`reset_settings`
after changing the environment, e.g. in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .utils import decimal_from_str


@dataclass(frozen=True)
class Settings:
    max_installments: int = 120
    balance_tolerance: Decimal = Decimal("0.01")
    log_level: str = "WARNING"


_SETTINGS: Optional[Settings] = None


def _settings_from_env() -> Settings:
    defaults = Settings()
    max_count = os.environ.get("INSTALLMENT_MAX_COUNT")
    tolerance = os.environ.get("INSTALLMENT_BALANCE_TOLERANCE")
    log_level = os.environ.get("INSTALLMENT_LOG_LEVEL")
    try:
        max_installments = int(max_count) if max_count else defaults.max_installments
    except ValueError as exc:
        raise ValueError(f"INSTALLMENT_MAX_COUNT must be an integer; got {max_count}") from exc
    if max_installments < 1:
        raise ValueError(f"INSTALLMENT_MAX_COUNT must be at least 1; got {max_installments}")
    return Settings(
        max_installments=max_installments,
        balance_tolerance=decimal_from_str(tolerance) if tolerance else defaults.balance_tolerance,
        log_level=(log_level or defaults.log_level).upper(),
    )


def load_settings() -> Settings:
    """Return the cached settings, reading the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = _settings_from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _SETTINGS
    _SETTINGS = None
