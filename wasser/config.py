"""
config.py - environment settings

Reads .env / environment variables into AppSettings. The calculators never
read the environment; callers turn settings into an AppConfig and pass it in.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .core.config import AppConfig, DEFAULT_CONFIG
from .core.exceptions import ConfigurationError
from .domain.models import MissingRecipePolicy

load_dotenv()

ROOT_DIR = Path(__file__).parent.parent
LOGS_DIR = ROOT_DIR / "logs"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw.strip().replace(",", "."))
    except ValueError as e:
        raise ConfigurationError(
            f"{key} must be a number, got {raw!r}", config_key=key, cause=e
        ) from e


@dataclass
class AppSettings:
    """Application settings"""

    # --- calculation defaults ---
    currency: str = DEFAULT_CONFIG.currency
    paint_loss_percent: float = DEFAULT_CONFIG.paint_loss_percent
    min_profit_margin: float = DEFAULT_CONFIG.min_profit_margin
    missing_recipe_policy: str = DEFAULT_CONFIG.missing_recipe_policy

    # --- storage ---
    audit_path: Optional[str] = None            # audit log JSON (None = memory only)

    # --- misc ---
    debug_mode: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Load settings from environment variables"""
        return cls(
            currency=os.getenv("WASSER_CURRENCY", DEFAULT_CONFIG.currency),
            paint_loss_percent=_env_float(
                "WASSER_PAINT_LOSS_PERCENT", DEFAULT_CONFIG.paint_loss_percent
            ),
            min_profit_margin=_env_float(
                "WASSER_MIN_PROFIT_MARGIN", DEFAULT_CONFIG.min_profit_margin
            ),
            missing_recipe_policy=os.getenv(
                "WASSER_MISSING_RECIPE_POLICY", DEFAULT_CONFIG.missing_recipe_policy
            ),
            audit_path=os.getenv("WASSER_AUDIT_PATH") or None,
            debug_mode=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def to_app_config(self) -> AppConfig:
        """Calculation config for CostEngine / PricingService

        Raises:
            ConfigurationError: unknown missing-recipe policy
        """
        try:
            policy = MissingRecipePolicy.parse(self.missing_recipe_policy, strict=True)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown missing recipe policy: {self.missing_recipe_policy!r}",
                config_key="WASSER_MISSING_RECIPE_POLICY",
                cause=e,
            ) from e

        return AppConfig(
            currency=self.currency or DEFAULT_CONFIG.currency,
            paint_loss_percent=max(0.0, self.paint_loss_percent),
            min_profit_margin=max(0.0, self.min_profit_margin),
            missing_recipe_policy=policy.value,
        )

    def validate(self) -> List[str]:
        """Settings problems (empty list when valid)"""
        errors = []

        if not self.currency:
            errors.append("WASSER_CURRENCY must not be empty.")

        if self.paint_loss_percent < 0:
            errors.append("Paint loss percent must be >= 0.")

        if not (0 <= self.min_profit_margin < 100):
            errors.append("Minimum profit margin must be between 0 and 100.")

        policies = [p.value for p in MissingRecipePolicy]
        if str(self.missing_recipe_policy).lower() not in policies:
            errors.append(f"Missing recipe policy must be one of {policies}.")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {list(LOG_LEVELS)}.")

        return errors


_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Settings instance (loaded on first use)"""
    global _settings
    if _settings is None:
        _settings = AppSettings.from_env()
    return _settings


def reload_settings() -> AppSettings:
    """Reload settings from the environment"""
    global _settings
    _settings = AppSettings.from_env()
    return _settings
