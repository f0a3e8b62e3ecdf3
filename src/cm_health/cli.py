from __future__ import annotations
import logging
import re
from pathlib import Path

import typer
from rich.console import Console

from .config import Settings, Thresholds, load_thresholds_file, parse_threshold_options
from .connection import connect
from .errors import ConfigError, SiteConnectionError
from .renderer import HtmlRenderer, write_document
from .reporter import Reporter
from .runner import Runner
from .suites.default import build_registry

app = typer.Typer(add_completion=False, no_args_is_help=True)

log = logging.getLogger("cm_health")

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

SITE_CODE_RE = re.compile(r"[A-Za-z0-9]{3}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def _thresholds(items: list[str] | None, thresholds_file: Path | None) -> Thresholds:
    overrides: dict[str, object] = {}
    if thresholds_file is not None:
        overrides.update(load_thresholds_file(thresholds_file))
    overrides.update(parse_threshold_options(items or []))
    return Thresholds().with_overrides(overrides)


def _settings(
    provider: str,
    site_code: str,
    output: Path,
    timeout: float,
    insecure: bool,
    username: str | None,
    password: str | None,
    thresholds: Thresholds,
) -> Settings:
    if not SITE_CODE_RE.fullmatch(site_code):
        raise ConfigError(f"site code must be three letters or digits, got {site_code!r}")
    return Settings(
        provider=provider,
        site_code=site_code.upper(),
        output_path=output,
        timeout_s=timeout,
        verify_tls=not insecure,
        username=username,
        password=password,
        thresholds=thresholds,
    )


@app.callback()
def main() -> None:
    pass


@app.command("run")
def run(
    provider: str = typer.Argument(..., help="SMS Provider host running the AdminService"),
    site_code: str = typer.Option(..., "--site-code", "-s", help="Three-character site code"),
    output: Path = typer.Option(Path("cm-health-report.html"), "--output", "-o", help="HTML report path (overwritten)"),
    timeout: float = typer.Option(30.0, "--timeout", help="Deadline in seconds for each query, including reading the response"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate verification"),
    username: str | None = typer.Option(None, "--username", envvar="CM_HEALTH_USERNAME"),
    password: str | None = typer.Option(None, "--password", envvar="CM_HEALTH_PASSWORD"),
    threshold: list[str] | None = typer.Option(None, "--threshold", "-t", help="Override a threshold, e.g. cpu_percent=90"),
    thresholds_file: Path | None = typer.Option(None, "--thresholds-file", help="JSON object of threshold overrides"),
    fail_on_critical: bool = typer.Option(False, "--fail-on-critical", help="Return exit code 2 if any row is Critical or Unknown."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Query the site and write the HTML health report."""
    _configure_logging(verbose)
    console = Console()
    try:
        settings = _settings(
            provider, site_code, output, timeout, insecure, username, password,
            _thresholds(threshold, thresholds_file),
        )
    except ConfigError as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    renderer = HtmlRenderer()
    try:
        conn = connect(settings)
    except SiteConnectionError as e:
        log.error("Connection failed: %s", e)
        typer.secho(f"Cannot connect to site {settings.site_code}: {e}", fg=typer.colors.RED, err=True)
        try:
            write_document(settings.output_path, renderer.render_error(settings.target, str(e)))
        except OSError as write_err:
            typer.secho(f"Cannot write {settings.output_path}: {write_err}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        report = Runner(conn, settings.target).run(build_registry(settings))
    finally:
        conn.close()

    reporter = Reporter(console)
    for section in report.sections:
        reporter.section(section)

    try:
        write_document(settings.output_path, renderer.render(report))
    except OSError as e:
        log.error("Cannot write report: %s", e)
        typer.secho(f"Cannot write {settings.output_path}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    log.info("Report written to %s", settings.output_path)
    reporter.summary(report, settings.output_path)

    code = 2 if fail_on_critical and report.has_critical() else 0
    raise typer.Exit(code=code)


@app.command("checks")
def checks(
    threshold: list[str] | None = typer.Option(None, "--threshold", "-t"),
    thresholds_file: Path | None = typer.Option(None, "--thresholds-file"),
):
    """List the checks a report run performs."""
    try:
        thresholds = _thresholds(threshold, thresholds_file)
    except ConfigError as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    settings = Settings(provider="-", site_code="-", thresholds=thresholds)
    reporter = Reporter(Console())
    reporter.catalogue(build_registry(settings))
    for name, value in thresholds.as_dict().items():
        typer.echo(f"{name} = {value:g}")


if __name__ == "__main__":
    app()
