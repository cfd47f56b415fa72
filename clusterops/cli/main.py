"""Main CLI interface using Typer."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..aws import EksClient
from ..config import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_REGION,
    RunSettings,
    parse_choice,
    resolve_config_file,
    validate_target_version,
)
from ..core import (
    BackupManager,
    ClusterValidator,
    PrerequisiteChecker,
    StatusWaiter,
    UpdateSequencer,
    ValidationReporter,
    check_tools,
)
from ..core.backup import DEFAULT_BACKUP_ROOT
from ..core.validator import ROLLBACK_PROCEDURE
from ..errors import RemoteOperationError, ValidationFailedError
from ..model.options import UpdateType, ValidationType
from ..model.report import ReportFormat
from ..model.update import StepOutcome, UpdateRequest, UpdateSummary
from ..model.validation import FAILED, CheckOutcome, ValidationResults
from ..utils.logger import get_logger, set_verbose

# Create CLI app; -h/--help is added per command so it can exit 1
app = typer.Typer(
    name="clusterops",
    help="Update, validate and back up EKS clusters",
    add_completion=False,
    context_settings={"help_option_names": []},
)

console = Console()
logger = get_logger(__name__)

OUTCOME_STYLES = {
    CheckOutcome.SUCCESS: "[green]✓ PASS[/green]",
    CheckOutcome.WARNING: "[yellow]⚠ WARN[/yellow]",
    CheckOutcome.ERROR: "[red]✗ FAIL[/red]",
}

STEP_STYLES = {
    StepOutcome.SKIPPED: "[dim]skipped[/dim]",
    StepOutcome.DRY_RUN: "[cyan]dry-run[/cyan]",
    StepOutcome.COMPLETED: "[green]completed[/green]",
}


def _help_callback(ctx: typer.Context, value: bool) -> None:
    if value and not ctx.resilient_parsing:
        typer.echo(ctx.get_help())
        raise typer.Exit(1)


def _help_option():
    return typer.Option(
        False,
        "--help",
        "-h",
        is_eager=True,
        callback=_help_callback,
        help="Show this message and exit.",
    )


def _environment_option():
    return typer.Option(
        DEFAULT_ENVIRONMENT,
        "--environment",
        "-e",
        envvar="ENVIRONMENT",
        help="Environment (dev, staging, production)",
    )


def _cluster_option():
    return typer.Option(
        None,
        "--cluster-name",
        "-c",
        envvar="CLUSTER_NAME",
        help="EKS cluster name (default: <environment>-eks)",
    )


def _region_option():
    return typer.Option(DEFAULT_REGION, "--region", "-r", envvar="AWS_REGION", help="AWS region")


def _backup_root_option():
    return typer.Option(
        DEFAULT_BACKUP_ROOT, "--backup-root", help="Directory holding cluster backups"
    )


def _print_checks(results: ValidationResults, title: str = "Validation Results") -> None:
    """Print check results in a formatted table."""
    if not results.checks:
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Result", no_wrap=True)
    table.add_column("Check", style="cyan")
    table.add_column("Details", style="white")

    for check in results.checks:
        table.add_row(OUTCOME_STYLES[check.outcome], check.name, check.message)

    console.print(table)
    console.print(
        f"Passed: [green]{results.passed}[/green]  "
        f"Warnings: [yellow]{results.warnings}[/yellow]  "
        f"Failed: [red]{results.failed}[/red]"
    )


def _print_steps(summary: UpdateSummary) -> None:
    """Print update steps in a formatted table."""
    if not summary.steps:
        console.print("No update steps were needed")
        return

    table = Table(title="Update Steps", show_header=True, header_style="bold magenta")
    table.add_column("Scope", style="cyan")
    table.add_column("Target", style="green")
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Details", style="white")

    for step in summary.steps:
        table.add_row(step.scope, step.target, STEP_STYLES[step.outcome], step.detail)

    console.print(table)


def _connect(settings: RunSettings):
    """Check prerequisites and return EKS and kubectl clients for the cluster."""
    # Tools first so a missing binary fails before any remote call
    check_tools()
    eks = EksClient(settings.cluster_name, settings.region)
    k8s = PrerequisiteChecker(eks).check()
    return eks, k8s


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    show_help: bool = _help_option(),
):
    """Update, validate and back up EKS clusters."""
    set_verbose(verbose)


@app.command()
def update(
    environment: str = _environment_option(),
    cluster_name: Optional[str] = _cluster_option(),
    region: str = _region_option(),
    update_type: str = typer.Option(
        UpdateType.ALL.value,
        "--update-type",
        "-t",
        help="Update type (all, k8s-version, nodegroups, addons, config)",
    ),
    target_version: Optional[str] = typer.Option(
        None, "--target-version", "-v", help="Target Kubernetes version (e.g. 1.29)"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config-file",
        "-f",
        help="Cluster config file (default: cluster-config/<environment>-cluster.yaml)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Show what would be done"),
    force: bool = typer.Option(
        False, "--force", "-F", help="Skip confirmation and proceed despite warnings"
    ),
    skip_backup: bool = typer.Option(False, "--skip-backup", help="Skip backup creation"),
    skip_validation: bool = typer.Option(
        False, "--skip-validation", help="Skip pre and post update validation"
    ),
    backup_root: Path = _backup_root_option(),
    poll_interval: float = typer.Option(
        30.0, "--poll-interval", help="Initial seconds between status polls"
    ),
    poll_timeout: float = typer.Option(
        3600.0, "--poll-timeout", help="Maximum seconds to wait for each update"
    ),
    show_help: bool = _help_option(),
):
    """Update the cluster control plane, node groups, add-ons or configuration."""
    try:
        settings = RunSettings.from_options(
            environment,
            cluster_name,
            region,
            poll_interval=poll_interval,
            poll_timeout=poll_timeout,
        )
        request = UpdateRequest(
            update_type=parse_choice(UpdateType, update_type, "update type"),
            target_version=validate_target_version(target_version),
            config_file=resolve_config_file(config_file, settings.environment),
            dry_run=dry_run,
            force=force,
            skip_backup=skip_backup,
            skip_validation=skip_validation,
        )

        console.print(
            f"Updating cluster [cyan]{settings.cluster_name}[/cyan] "
            f"({settings.environment.value}, {settings.region}), update type "
            f"[cyan]{request.update_type.value}[/cyan]"
        )
        if dry_run:
            console.print("[yellow]DRY RUN MODE - No changes will be made[/yellow]")

        eks, k8s = _connect(settings)
        sequencer = UpdateSequencer(
            settings,
            eks,
            StatusWaiter(
                interval=settings.poll_interval,
                max_interval=settings.poll_max_interval,
                timeout=settings.poll_timeout,
            ),
            backups=BackupManager(eks, k8s, backup_root),
            validator=ClusterValidator(
                settings.cluster_name,
                eks,
                k8s,
                backup_root=backup_root,
                settle_seconds=settings.settle_seconds,
            ),
            confirm=lambda message: typer.confirm(message, default=False),
        )
        summary = sequencer.run(request)

        _print_steps(summary)
        if summary.post_checks is not None:
            _print_checks(summary.post_checks, "Post-update Validation")
        if summary.backup_path:
            console.print(f"Backup: [cyan]{summary.backup_path}[/cyan]")
        console.print(
            f"[green]✓[/green] Cluster update finished "
            f"(version {summary.version_before} → {summary.version_after or summary.version_before})"
        )

    except Exception as e:
        if isinstance(e, ValidationFailedError) and e.results is not None:
            _print_checks(e.results)
        console.print(f"[red]Error:[/red] {str(e)}")
        if isinstance(e, RemoteOperationError):
            console.print("Run 'clusterops rollback' to review the manual restore procedure")
        raise typer.Exit(1)


@app.command()
def validate(
    environment: str = _environment_option(),
    cluster_name: Optional[str] = _cluster_option(),
    region: str = _region_option(),
    validation_type: str = typer.Option(
        ValidationType.ALL.value,
        "--validation-type",
        "-t",
        help="Validation type (all, health, pre-update, post-update, rollback)",
    ),
    strict: bool = typer.Option(False, "--strict", "-s", help="Treat warnings as failures"),
    output_format: str = typer.Option(
        ReportFormat.TEXT.value, "--format", "-f", help="Report format (text, json, yaml)"
    ),
    backup_dir: Optional[Path] = typer.Option(
        None, "--backup-dir", "-b", help="Backup directory for rollback validation"
    ),
    rollback: bool = typer.Option(False, "--rollback", help="Validate rollback readiness"),
    output: Path = typer.Option(Path("."), "--output", "-o", help="Report output directory"),
    backup_root: Path = _backup_root_option(),
    show_help: bool = _help_option(),
):
    """Validate cluster health and write a report."""
    try:
        settings = RunSettings.from_options(environment, cluster_name, region)
        if rollback:
            vtype = ValidationType.ROLLBACK
        else:
            vtype = parse_choice(ValidationType, validation_type, "validation type")
        report_format = parse_choice(ReportFormat, output_format, "output format")

        console.print(
            f"Validating cluster [cyan]{settings.cluster_name}[/cyan] "
            f"({settings.environment.value}, {settings.region}), validation type "
            f"[cyan]{vtype.value}[/cyan]"
        )

        if vtype == ValidationType.ROLLBACK:
            # Works offline against the local backup
            validator = ClusterValidator(settings.cluster_name, backup_root=backup_root)
        else:
            eks, k8s = _connect(settings)
            validator = ClusterValidator(
                settings.cluster_name,
                eks,
                k8s,
                backup_root=backup_root,
                settle_seconds=settings.settle_seconds,
            )

        results = validator.run(vtype, backup_dir=backup_dir)

        reporter = ValidationReporter()
        report = reporter.build(results, settings, vtype, strict)
        report_path = reporter.save(report, output, report_format)

        _print_checks(results)
        console.print(f"Report: [cyan]{report_path}[/cyan]")

        if report.status == FAILED:
            raise ValidationFailedError(
                f"Cluster validation FAILED ({results.failed} errors, {results.warnings} warnings)"
            )
        console.print("[green]✓[/green] Cluster validation PASSED")

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def backup(
    environment: str = _environment_option(),
    cluster_name: Optional[str] = _cluster_option(),
    region: str = _region_option(),
    backup_root: Path = _backup_root_option(),
    show_help: bool = _help_option(),
):
    """Capture a backup snapshot of the cluster without updating it."""
    try:
        settings = RunSettings.from_options(environment, cluster_name, region)
        eks, k8s = _connect(settings)
        snapshot = BackupManager(eks, k8s, backup_root).create()

        console.print(f"[green]✓[/green] Backup created in [cyan]{snapshot.path}[/cyan]")
        for filename in snapshot.files:
            console.print(f"  • {filename}")

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def rollback(
    environment: str = _environment_option(),
    cluster_name: Optional[str] = _cluster_option(),
    region: str = _region_option(),
    backup_dir: Optional[Path] = typer.Option(
        None, "--backup-dir", "-b", help="Backup directory (default: latest backup)"
    ),
    backup_root: Path = _backup_root_option(),
    show_help: bool = _help_option(),
):
    """Check a backup and print the manual restore procedure. Never changes the cluster."""
    try:
        settings = RunSettings.from_options(environment, cluster_name, region)
        validator = ClusterValidator(settings.cluster_name, backup_root=backup_root)
        results = validator.run(ValidationType.ROLLBACK, backup_dir=backup_dir)
        _print_checks(results, "Rollback Readiness")

        if results.failed:
            raise ValidationFailedError("Backup is incomplete; rollback cannot proceed")

        console.print("\n[bold]Manual rollback procedure:[/bold]")
        for number, step in enumerate(ROLLBACK_PROCEDURE, start=1):
            console.print(f"  {number}. {step}")
        console.print(
            f"Backup directory: [cyan]{validator.resolve_backup_dir(backup_dir)}[/cyan]"
        )

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def version(show_help: bool = _help_option()):
    """Show the clusterops version."""
    console.print(f"clusterops {__version__}")


if __name__ == "__main__":
    app()
