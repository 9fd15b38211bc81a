"""
App Mirror — CLI Entry Point

Usage:
    appmirror [--root DIR] [--catalog FILE] import-apps
    appmirror [--root DIR] [--catalog FILE] update-apps
    appmirror [--root DIR] verify-apps
    appmirror [--root DIR] mirror-status
"""

from __future__ import annotations

# Load .env file FIRST, before anything reads env vars
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from .catalog.loader import load_catalog
from .cli.mirror import import_apps, mirror_status, update_apps, verify_apps
from .logging_config import setup_logging
from .mirror.config import MirrorSettings
from .validation import ConfigurationError, ValidationError

# Initialize logging
setup_logging()


@click.group()
@click.option("--root", type=click.Path(file_okay=False, path_type=Path), help="Mirror root (default: $MIRROR_ROOT or ./apps)")
@click.option("--catalog", type=click.Path(dir_okay=False, path_type=Path), help="Catalog YAML (default: $MIRROR_CATALOG or built-in)")
@click.pass_context
def cli(ctx: click.Context, root: Optional[Path], catalog: Optional[Path]) -> None:
    """App Mirror — keep a local copy of registry apps current."""
    ctx.ensure_object(dict)

    try:
        settings = MirrorSettings.from_env().with_overrides(root=root, catalog_path=catalog)
        ctx.obj["catalog"] = load_catalog(settings.catalog_path)
    except (ConfigurationError, ValidationError) as e:
        click.secho(f"❌ Configuration error: {e}", fg="red", err=True)
        raise SystemExit(1)

    ctx.obj["settings"] = settings


cli.add_command(import_apps)
cli.add_command(update_apps)
cli.add_command(verify_apps)
cli.add_command(mirror_status)


if __name__ == "__main__":
    cli()
