"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``STEAM_INVENTORY_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The library itself never reads the environment: ``InventoryFetcher`` and
``SteamInventory`` accept an ``AppConfig`` (or fall back to ``AppConfig()``
defaults).  Only the CLI calls ``load_config``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from steam_inventory.pipeline.retry import RetryPolicy

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/67.0.3396.99 Safari/537.36"
)

# Env var names for provider credentials (read by the CLI only).
CREDENTIAL_ENV_VARS: dict[str, str] = {
    "webapi": "STEAM_WEBAPI_KEY",
    "steamapis": "STEAMAPIS_KEY",
    "steamsupply": "STEAMSUPPLY_KEY",
    "rapidapi": "RAPIDAPI_KEY",
}

# ── Sub-config models ─────────────────────────────────────────────────────────


class HttpConfig(BaseModel):
    """Shared HTTP transport settings."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 50.0
    user_agent: str = DEFAULT_USER_AGENT
    local_address: Optional[str] = None

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"timeout_seconds must be > 0, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


def _default_provider_policies() -> dict[str, RetryPolicy]:
    return {
        "community": RetryPolicy(strategy="fixed", base_seconds=0.0, max_retries=0),
        "webapi": RetryPolicy(strategy="fixed", base_seconds=0.0, max_retries=0),
        "steamapis": RetryPolicy(max_retries=5),
        "steamsupply": RetryPolicy(max_retries=5),
        "rapidapi": RetryPolicy(max_retries=10),
    }


class AppConfig(BaseModel):
    """Complete application configuration.

    ``providers`` maps a provider name to its ``RetryPolicy``; providers absent
    from the mapping get the adapter's built-in default budget.
    """

    model_config = ConfigDict(frozen=True)

    http: HttpConfig = HttpConfig()
    logging: LoggingConfig = LoggingConfig()
    providers: dict[str, RetryPolicy] = _default_provider_policies()
    default_language: str = "english"
    debug: bool = False

    def retry_policy(self, provider: str) -> Optional[RetryPolicy]:
        """Return the configured policy for ``provider``, or ``None``."""
        return self.providers.get(provider)


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply STEAM_INVENTORY_* env vars to the raw config dict.

    Supported overrides:
      STEAM_INVENTORY_LOG_LEVEL     → raw["logging"]["level"]
      STEAM_INVENTORY_HTTP_TIMEOUT  → raw["http"]["timeout_seconds"]
      STEAM_INVENTORY_DEBUG         → raw["debug"]
    """
    if log_level := os.environ.get("STEAM_INVENTORY_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if timeout := os.environ.get("STEAM_INVENTORY_HTTP_TIMEOUT"):
        raw.setdefault("http", {})["timeout_seconds"] = float(timeout)

    if debug := os.environ.get("STEAM_INVENTORY_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    providers = _default_provider_policies()
    for name, block in (raw.get("providers") or {}).items():
        providers[name] = RetryPolicy(**block)

    http_raw = dict(raw.get("http", {}))
    # TOML has no null; an empty string means "not set".
    if not http_raw.get("local_address"):
        http_raw.pop("local_address", None)

    return AppConfig(
        http=HttpConfig(**http_raw),
        logging=LoggingConfig(**raw.get("logging", {})),
        providers=providers,
        default_language=raw.get("default_language", "english"),
        debug=raw.get("debug", False),
    )
