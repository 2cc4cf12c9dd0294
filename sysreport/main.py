"""
sysreport — CLI entrypoint.

Usage:
    sysreport --help
    sysreport report > host-report.txt
    sysreport report --section network --section disk
    sudo sysreport report --output /tmp/report.txt
    sysreport tools
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from sysreport import __version__
from sysreport.adapters.base import DEFAULT_TIMEOUT
from sysreport.core.observability.logging_config import resolve_level, setup_logging

# Exit code for an invalid catalog or section selection
EXIT_CONFIG = 2


@click.group()
@click.version_option(version=__version__, prog_name="sysreport")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Debug logging, including probe stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """sysreport — Linux host diagnostic report generator."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _load_catalog_or_exit(catalog_path: str | None):
    from sysreport.core.config.catalog_loader import CatalogError, load_catalog

    try:
        return load_catalog(Path(catalog_path) if catalog_path else None)
    except CatalogError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(EXIT_CONFIG)


_catalog_option = click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Probe catalog YAML (default: built-in).",
)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.option(
    "--timeout",
    "-t",
    type=click.FloatRange(min=0.1),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-probe timeout in seconds (sampling probes get extra time).",
)
@click.option(
    "--budget",
    type=click.FloatRange(min=1.0),
    default=None,
    help="Overall time budget in seconds; later probes are skipped once spent.",
)
@click.option("--section", "-s", "sections", multiple=True, help="Only these sections (repeatable).")
@click.option("--mock", is_flag=True, help="Use the mock runner (no real execution).")
@_catalog_option
@click.pass_context
def report(
    ctx: click.Context,
    output: str | None,
    timeout: float,
    budget: float | None,
    sections: tuple[str, ...],
    mock: bool,
    catalog_path: str | None,
) -> None:
    """Generate the diagnostic report.

    Examples:

        sysreport report > report.txt

        sysreport report -s network -s process --timeout 10

        sudo sysreport report --budget 120 -o /tmp/report.txt
    """
    from sysreport.adapters.mock import MockAvailability, MockRunner
    from sysreport.adapters.shell.availability import is_available
    from sysreport.core.config.catalog_loader import CatalogError, select_sections
    from sysreport.core.models.privilege import PrivilegeContext, detect_privilege
    from sysreport.core.use_cases.report import generate_report

    catalog = _load_catalog_or_exit(catalog_path)
    try:
        select_sections(catalog, list(sections))
    except CatalogError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(EXIT_CONFIG)

    if mock:
        privilege = PrivilegeContext(is_elevated=True, escalation_available=False, user="mock")
        runner = MockRunner()
        availability = MockAvailability()
    else:
        privilege = detect_privilege()
        runner = None
        availability = is_available

    if not privilege.is_elevated and not ctx.obj.get("quiet"):
        click.secho(
            "⚠️  Some probes require root privileges; "
            "run with sudo for complete diagnostics.",
            fg="yellow",
            err=True,
        )

    if output:
        try:
            out = open(output, "w", encoding="utf-8")
        except OSError as e:
            click.secho(f"❌ Cannot open {output}: {e}", fg="red", err=True)
            sys.exit(1)
    else:
        # The report is UTF-8 whatever the locale says
        out = click.get_text_stream("stdout", encoding="utf-8", errors="replace")

    try:
        outcome = generate_report(
            out,
            catalog=catalog,
            sections=list(sections) or None,
            ctx=privilege,
            runner=runner,
            availability=availability,
            timeout=timeout,
            budget_seconds=budget,
        )
    finally:
        if output:
            try:
                out.close()
            except OSError:
                pass

    if outcome.error:
        click.secho(f"❌ {outcome.error}", fg="red", err=True)
    elif output and not ctx.obj.get("quiet"):
        stats = outcome.stats
        click.secho(f"💾 Report saved to {output}", fg="cyan", err=True)
        click.echo(
            f"   {stats.succeeded}/{stats.total} probes succeeded, "
            f"{stats.failed} failed, {stats.not_installed} not installed, "
            f"{stats.skipped} skipped",
            err=True,
        )

    sys.exit(outcome.exit_code)


@cli.command("catalog")
@_catalog_option
def catalog_cmd(catalog_path: str | None) -> None:
    """List sections, subsections and probe commands."""
    catalog = _load_catalog_or_exit(catalog_path)

    for number, section in enumerate(catalog.sections, start=1):
        click.echo()
        click.secho(f"{number}. {section.title}", fg="cyan", bold=True, nl=False)
        click.echo(f"  [{section.name}]")
        for sub_index, subsection in enumerate(section.subsections, start=1):
            click.secho(f"   {number}.{sub_index} {subsection.title}", bold=True)
            for probe in subsection.probes:
                chain = " → ".join(p.command for p in probe.chain())
                marker = " (root)" if probe.requires_elevation else ""
                click.echo(f"       • {chain}{marker}")
    click.echo()


@cli.command()
@_catalog_option
def tools(catalog_path: str | None) -> None:
    """Show which catalog tools are installed on this host."""
    from sysreport.adapters.shell.availability import check_tools

    catalog = _load_catalog_or_exit(catalog_path)
    hints = catalog.tools()
    status = check_tools(hints)

    installed = sum(1 for ok in status.values() if ok)
    click.secho(f"\n🔍 Tools: {installed}/{len(status)} installed", fg="cyan", bold=True)
    click.echo()

    for tool, ok in status.items():
        if ok:
            click.secho(f"   ✓ {tool}", fg="green")
        else:
            click.secho(f"   ✗ {tool}", fg="red", nl=False)
            click.echo(f"  {hints[tool]}" if hints[tool] else "  (not installed)")

    click.echo()


@cli.command()
def privileges() -> None:
    """Show the detected privilege context."""
    from sysreport.core.models.privilege import ESCALATION_HELPER, detect_privilege

    ctx = detect_privilege()

    click.echo()
    click.secho(f"👤 Running as: {ctx.user or 'unknown'}", bold=True)
    if ctx.is_elevated:
        click.secho("   Elevated: yes", fg="green")
    else:
        click.secho("   Elevated: no", fg="yellow")
    helper = "available" if ctx.escalation_available else "not found"
    click.echo(f"   Escalation helper ({ESCALATION_HELPER}): {helper}")

    if not ctx.is_elevated:
        click.echo()
        if ctx.escalation_available:
            click.echo(
                f"   Elevated probes run via '{ESCALATION_HELPER} -n' and fail "
                "unless credentials are cached (run 'sudo -v' first)."
            )
        else:
            click.secho(
                "   Elevated probes run unescalated and may be denied. "
                "Re-run as root for complete diagnostics.",
                fg="yellow",
            )
    click.echo()


if __name__ == "__main__":
    cli()
