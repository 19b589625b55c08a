from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import click
import structlog

from riskintel.config.logging import configure_logging

if TYPE_CHECKING:
    from riskintel.orchestration.service import AssessmentService

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _run(action: Callable[[AssessmentService], Awaitable[T]]) -> T:
    from riskintel.config.settings import Settings
    from riskintel.orchestration.runtime import build_runtime

    async def _main() -> T:
        runtime = await build_runtime(Settings())
        try:
            return await action(runtime.service)
        finally:
            await runtime.aclose()

    return asyncio.run(_main())


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()  # type: ignore[misc]
@click.option("--log-level", default="INFO", help="Log level")  # type: ignore[misc]
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")  # type: ignore[misc]
def cli(log_level: str, json_logs: bool) -> None:
    """Risk Intelligence: multi-provider KYC risk assessment."""
    configure_logging(log_level, json_output=json_logs)


@cli.command()  # type: ignore[misc]
@click.argument("subject_id")  # type: ignore[misc]
def assess(subject_id: str) -> None:
    """Run a full risk assessment for one subject."""
    from riskintel.api.schemas import AssessmentResponse
    from riskintel.domain.errors import ScoringError, SubjectNotFoundError

    try:
        result = _run(lambda service: service.assess_one(subject_id))
    except (SubjectNotFoundError, ScoringError) as exc:
        raise click.ClickException(str(exc)) from exc

    _echo_json(AssessmentResponse.from_result(result).model_dump(mode="json"))
    if not result.fully_persisted:
        click.echo("Warning: one or more persistence sinks failed", err=True)


@cli.command()  # type: ignore[misc]
@click.option("--limit", default=10, help="Maximum subjects per sweep")  # type: ignore[misc]
def sweep(limit: int) -> None:
    """Assess pending subjects in one batch."""
    summary = _run(lambda service: service.assess_pending(limit=limit))

    click.echo(f"Processed:    {summary.processed}")
    click.echo(f"Successful:   {summary.successful}")
    click.echo(f"Failed:       {summary.failed}")
    click.echo(f"Success rate: {summary.success_rate}%")
    for outcome in summary.results:
        status = f"score={outcome.risk_score}" if outcome.success else f"error={outcome.error}"
        click.echo(f"  {outcome.subject_id}: {status}")


@cli.command("high-risk")  # type: ignore[misc]
@click.option("--min-score", default=0, help="Minimum aggregate score")  # type: ignore[misc]
@click.option(  # type: ignore[misc]
    "--level",
    "levels",
    multiple=True,
    type=click.Choice(["low", "medium", "high", "critical"]),
    help="Risk level filter (repeatable, default: high and critical)",
)
@click.option("--limit", default=50, help="Maximum subjects to list")  # type: ignore[misc]
def high_risk(min_score: int, levels: tuple[str, ...], limit: int) -> None:
    """List subjects with high aggregate risk."""
    from riskintel.domain.levels import RiskLevel
    from riskintel.orchestration.service import DEFAULT_HIGH_RISK_LEVELS

    wanted = [RiskLevel(level) for level in levels] or list(DEFAULT_HIGH_RISK_LEVELS)
    listing = _run(lambda service: service.list_high_risk(min_score=min_score, levels=wanted, limit=limit))

    click.echo(f"{'Subject':<24} {'Score':>5}  Level")
    click.echo("-" * 44)
    for entry in listing.subjects:
        click.echo(f"{entry.subject_id:<24} {entry.risk_score:>5}  {entry.risk_level.value}")
    click.echo(f"\nTotal: {listing.total}  Breakdown: {json.dumps(listing.level_breakdown)}")


@cli.command()  # type: ignore[misc]
@click.argument("subject_id")  # type: ignore[misc]
def summary(subject_id: str) -> None:
    """Show the stored risk summary for one subject."""
    from riskintel.domain.errors import SubjectNotFoundError

    try:
        risk_summary = _run(lambda service: service.get_risk_summary(subject_id))
    except SubjectNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(risk_summary.model_dump(mode="json"))


@cli.command()  # type: ignore[misc]
@click.option("--host", default="0.0.0.0", help="Bind host")  # type: ignore[misc]
@click.option("--port", default=8000, help="Bind port")  # type: ignore[misc]
@click.option("--reload", is_flag=True, help="Enable auto-reload")  # type: ignore[misc]
def serve(host: str, port: int, reload: bool) -> None:
    """Start the FastAPI server."""
    import uvicorn

    uvicorn.run(
        "riskintel.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def run_server() -> None:
    cli(["serve"])


if __name__ == "__main__":
    cli()
