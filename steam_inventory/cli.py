"""
steam-inventory — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (fetch, list providers, print config).
  5. Report result to stdout; diagnostics go to stderr.

Install and run::

    pip install -e .
    steam-inventory --help
    steam-inventory providers
    steam-inventory validate-config
    steam-inventory fetch 76561197960287930 --app 730 --context 2
    steam-inventory fetch 76561197960287930 --provider steamapis --tradable-only -o inv.json
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="steam-inventory",
    help="Fetch and normalize Steam inventories from Steam or third-party mirrors.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from steam_inventory.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from steam_inventory.utils.logging import configure_logging
    configure_logging(config.logging)


def _resolve_api_key(provider: str, api_key: Optional[str]) -> Optional[str]:
    """Explicit ``--api-key`` wins; otherwise the provider's env var."""
    from steam_inventory.config import CREDENTIAL_ENV_VARS

    if api_key:
        return api_key
    env_var = CREDENTIAL_ENV_VARS.get(provider)
    return os.environ.get(env_var) if env_var else None


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("fetch")
def fetch(
    steam_id: str = typer.Argument(..., help="SteamID64, STEAM_X:Y:Z or [U:1:Z]."),
    provider: str = typer.Option(
        "community",
        "--provider",
        "-p",
        help="Provider to fetch from (see `steam-inventory providers`).",
    ),
    app_id: int = typer.Option(730, "--app", help="Steam app id (730 = CS2, 753 = Steam)."),
    context_id: int = typer.Option(2, "--context", help="Inventory context id."),
    tradable_only: bool = typer.Option(
        False,
        "--tradable-only",
        help="Keep only items whose description is tradable.",
    ),
    language: Optional[str] = typer.Option(
        None,
        "--language",
        "-l",
        help="Description language. Defaults to config default_language.",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="Provider API key. Defaults to the provider's env var (see .env).",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON to this file instead of stdout.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Fetch one inventory and print it as JSON.

    Output keys: ``inventory``, ``currency``, ``total_count``.
    Exits with code 1 on any fetch failure.
    """
    from steam_inventory.errors import InventoryError
    from steam_inventory.ingestion.http import HttpTransport
    from steam_inventory.pipeline.orchestrator import InventoryFetcher

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    credentials = _resolve_api_key(provider, api_key)

    with HttpTransport(config.http) as transport:
        fetcher = InventoryFetcher(transport, config)
        try:
            result = fetcher.fetch(
                provider,
                credentials,
                steam_id,
                app_id,
                context_id,
                tradable_only,
                language,
            )
        except InventoryError as exc:
            typer.echo(f"[ERROR] {type(exc).__name__}: {exc}", err=True)
            raise typer.Exit(code=1)

    payload = {
        "inventory": [item.model_dump(mode="json") for item in result.inventory],
        "currency": [item.model_dump(mode="json") for item in result.currency],
        "total_count": result.total_count,
    }
    text = json.dumps(payload, indent=2, ensure_ascii=False)

    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
        typer.echo(
            f"[OK] {len(result.inventory)} items, {len(result.currency)} currency stacks "
            f"(total {result.total_count}) written to {out_path}",
            err=True,
        )
    else:
        typer.echo(text)


@app.command("providers")
def providers(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List the supported providers with page size and retry policy."""
    from steam_inventory.config import CREDENTIAL_ENV_VARS
    from steam_inventory.pipeline.orchestrator import PROVIDERS, resolve_policy

    config = _load_config_or_exit(config_path)

    typer.echo(
        f"{'name':<12} {'backend':<20} {'page size':>9} {'retries':>7}  {'backoff':<24} credential"
    )
    for name, cls in PROVIDERS.items():
        policy = resolve_policy(config, cls)
        backoff = f"{policy.strategy} {policy.base_seconds}s<={policy.max_seconds}s"
        credential = CREDENTIAL_ENV_VARS.get(name, "-") if cls.requires_api_key else "-"
        page_size = str(cls.page_size) if cls.page_size else "-"
        typer.echo(
            f"{name:<12} {cls.display_name:<20} {page_size:>9} {policy.max_retries:>7}  {backoff:<24} {credential}"
        )


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  HTTP timeout:     {config.http.timeout_seconds}s")
    typer.echo(f"  Local address:    {config.http.local_address or '-'}")
    typer.echo(f"  Default language: {config.default_language}")
    typer.echo(f"  Providers:        {', '.join(sorted(config.providers))}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


if __name__ == "__main__":
    app()
