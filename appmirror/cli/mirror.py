"""
CLI mirror commands — import, update, verify and status of the local app mirror.

Usage:
    appmirror import-apps [--report FILE]
    appmirror update-apps [--report FILE]
    appmirror verify-apps [--json]
    appmirror mirror-status [--json]

import-apps and update-apps exit 0 even when individual apps fail; the
failures are logged and listed in the summary. They exit 1 only when the
run cannot start (no registry listing, no mirror root). verify-apps exits
1 when any check fails.

Do not run import-apps and update-apps against the same root at once.
"""

from __future__ import annotations

import json as json_lib
from pathlib import Path
from typing import Optional

import click

from ..errors import MirrorRootMissing, RegistryListingError
from ..mirror.state import RunReport


def _print_summary(report: RunReport, title: str) -> None:
    counts = report.counts()
    click.echo()
    click.secho(f"{title}: " + ", ".join(f"{n} {s}" for s, n in sorted(counts.items())), bold=True)

    for outcome in report.problems:
        line = f"  ✗ {outcome.app}: {outcome.status}"
        if outcome.detail:
            line += f" — {outcome.detail}"
        click.secho(line, fg="yellow")


def _save_report(report: RunReport, report_path: Optional[str]) -> None:
    if report_path:
        report.save(Path(report_path))


@click.command("import-apps")
@click.option("--report", "report_path", type=click.Path(dir_okay=False), help="Write a JSON run report")
@click.pass_context
def import_apps(ctx: click.Context, report_path: Optional[str]) -> None:
    """Populate the mirror from the catalog's request list."""
    from ..mirror.manager import MirrorManager

    settings = ctx.obj["settings"]
    catalog = ctx.obj["catalog"]

    with MirrorManager.from_settings(settings, catalog) as manager:
        try:
            report = manager.bootstrap()
        except RegistryListingError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            raise SystemExit(1)

    _print_summary(report, "Import")
    _save_report(report, report_path)


@click.command("update-apps")
@click.option("--report", "report_path", type=click.Path(dir_okay=False), help="Write a JSON run report")
@click.pass_context
def update_apps(ctx: click.Context, report_path: Optional[str]) -> None:
    """Refresh existing mirror entries whose upstream version changed."""
    from ..mirror.manager import MirrorManager

    settings = ctx.obj["settings"]
    catalog = ctx.obj["catalog"]

    with MirrorManager.from_settings(settings, catalog) as manager:
        try:
            report = manager.update()
        except MirrorRootMissing as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            raise SystemExit(1)

    _print_summary(report, "Update")
    _save_report(report, report_path)


@click.command("verify-apps")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def verify_apps(ctx: click.Context, as_json: bool) -> None:
    """Check that every mirrored app has valid config and compose files."""
    from ..mirror.verify import check_all

    root = ctx.obj["settings"].root
    try:
        result = check_all(root)
    except MirrorRootMissing as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json_lib.dumps(result.to_dict(), indent=2))
    elif result.passed:
        click.secho(f"✅ All {result.checked} apps verified successfully.", fg="green")
    else:
        for failure in result.failures:
            click.secho(str(failure), fg="red")
        click.secho("Verification failed for some apps.", fg="red", bold=True)

    if not result.passed:
        raise SystemExit(1)


@click.command("mirror-status")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def mirror_status(ctx: click.Context, as_json: bool) -> None:
    """List mirrored apps, their versions and which files they have."""
    from dataclasses import asdict

    from ..mirror.models import ArtifactKind
    from ..mirror.verify import list_entries

    root = ctx.obj["settings"].root
    try:
        entries = list_entries(root)
    except MirrorRootMissing as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json_lib.dumps([asdict(e) for e in entries], indent=2))
        return

    click.echo(f"\n📦 Mirror at {root}: {len(entries)} app(s)\n")
    for entry in entries:
        if entry.error:
            click.secho(f"  ❌ {entry.app}: {entry.error}", fg="red")
            continue
        marks = "".join(
            "✓" if kind.value in entry.artifacts else "·" for kind in ArtifactKind
        )
        click.echo(f"  {marks} {entry.app:30} {entry.version}")
    click.echo()
    click.echo("  columns: config, compose, description, logo")
