from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from field_quality_monitor.application.use_cases.run_check import RunProcess
from field_quality_monitor.domain.errors import SetupError
from field_quality_monitor.domain.models.result import Status
from field_quality_monitor.infrastructure.config import EngineConfig
from field_quality_monitor.infrastructure.logging import configure_logging
from field_quality_monitor.infrastructure.rules.checks import describe_checks

app = typer.Typer()


@app.command()
def run(
    config: Path = typer.Option(..., exists=True, readable=True, help="Path to rules.toml"),
    data: Path = typer.Option(..., exists=True, readable=True, help="Dataset file (csv, json, jsonl)"),
    workers: Optional[int] = typer.Option(None, min=1, help="Override engine.max_workers"),
    sort: Optional[str] = typer.Option(None, help="Comma separated sort keys, e.g. status,field"),
    output: Optional[Path] = typer.Option(None, help="Override output.path"),
    output_format: Optional[str] = typer.Option(None, "--format", help="log, jsonl or csv"),
    fail_on_error: bool = typer.Option(True, help="Exit 1 when any rule fails or errors"),
) -> None:
    try:
        configure_logging(EngineConfig.load(config).logging.level)
        process = RunProcess(
            config,
            data,
            max_workers=workers,
            output_format=output_format,
            output_path=output,
        )
        sort_by = [key.strip() for key in sort.split(",") if key.strip()] if sort else None
        table = process.execute(sort_by=sort_by)
    except (SetupError, ValueError) as exc:
        typer.echo(f"✗ {exc}", err=True)
        raise typer.Exit(code=2)

    counts = {status: sum(1 for o in table if o.status is status) for status in Status}
    typer.echo(
        f"✓ Executed {len(table)} rules: "
        f"{counts[Status.PASS]} passed, {counts[Status.FAIL]} failed, {counts[Status.ERROR]} errored"
    )
    if fail_on_error and (counts[Status.FAIL] or counts[Status.ERROR]):
        raise typer.Exit(code=1)


@app.command()
def checks() -> None:
    for name, signature in describe_checks().items():
        typer.echo(f"{name}{signature}")


if __name__ == "__main__":
    app()
