"""Main CLI entry point for benchwatch.

This module defines the Typer application and all CLI commands.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from benchwatch import __version__
from benchwatch.core.config import BenchmarkConfig, Settings
from benchwatch.core.exceptions import BenchwatchError
from benchwatch.core.ordering import ToolType
from benchwatch.core.types import RepositoryContext, Run

# Create the main Typer app
app = typer.Typer(
    name="benchwatch",
    help="benchwatch: Continuous benchmark history and regression alerts.",
    add_completion=False,
    no_args_is_help=True,
)

# Global state for options
state: dict[str, Any] = {
    "json": False,
    "log_level": None,
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"benchwatch v{__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to BENCHWATCH_LOG_LEVEL.",
        ),
    ] = None,
) -> None:
    """benchwatch: Continuous benchmark history and regression alerts.

    Store benchmark runs per commit and alert when performance regresses.
    """
    state["json"] = json_output
    state["log_level"] = log_level


@app.command()
def version() -> None:
    """Show the current version."""
    typer.echo(f"benchwatch v{__version__}")


def _load_run(path: Path) -> Run:
    """Load a normalized benchmark run from a JSON file."""
    try:
        return Run.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        typer.echo(f"Error: Could not read run file {path}: {e}", err=True)
        raise typer.Exit(2) from e
    except ValidationError as e:
        typer.echo(f"Error: Invalid run file {path}: {e}", err=True)
        raise typer.Exit(2) from e


@app.command()
def record(
    run_file: Annotated[
        Path,
        typer.Argument(help="Path to the normalized benchmark run (JSON)."),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the benchmark configuration (YAML).",
        ),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Suite name to record the run under."),
    ] = None,
    tool: Annotated[
        ToolType | None,
        typer.Option("--tool", "-t", help="Benchmark tool that produced the run."),
    ] = None,
    external_data_json_path: Annotated[
        str | None,
        typer.Option(
            "--external-data-json-path",
            help="Store history in this JSON file instead of the shared branch.",
        ),
    ] = None,
) -> None:
    """Record a benchmark run and check it for regressions.

    Examples:
        benchwatch record output.json --config benchmark.yaml
        benchwatch record output.json --tool cargo --external-data-json-path cache/data.json
        benchwatch --json record output.json --config benchmark.yaml
    """
    settings = Settings()
    configure_logging(state["log_level"] or settings.log_level)

    run = _load_run(run_file)
    overrides: dict[str, Any] = {
        "name": name,
        "tool": tool.value if tool is not None else None,
        "external_data_json_path": external_data_json_path,
    }

    try:
        if config_file is not None:
            config = BenchmarkConfig.from_yaml(config_file, overrides=overrides)
        else:
            config = BenchmarkConfig.from_mapping(
                {"tool": run.tool.value, **{k: v for k, v in overrides.items() if v is not None}}
            )
        if config.github_token is None and settings.github_token:
            config = config.model_copy(update={"github_token": settings.github_token})

        outcome = asyncio.run(_record(run, config, settings))
    except BenchwatchError as e:
        if state["json"]:
            typer.echo(json.dumps({"status": "fail", "error": str(e)}, indent=2))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    detection = outcome.detection
    results = {
        "suite": config.name,
        "commit": run.commit.id,
        "prior_runs": len(outcome.prior),
        "previous_commit": outcome.previous.commit.id if outcome.previous else None,
        "alerts": [
            {"name": a.name, "ratio": a.ratio, "baseline": a.baseline.value, "current": a.current.value}
            for a in (detection.alerts if detection else [])
        ],
        "comments": outcome.comment_urls,
        "status": "pass",
    }

    if state["json"]:
        typer.echo(json.dumps(results, indent=2))
        return

    typer.echo(f"Recorded '{config.name}' result for {run.commit.id}")
    typer.echo(f"  Prior runs: {len(outcome.prior)}")
    if outcome.previous is not None:
        typer.echo(f"  Previous:   {outcome.previous.commit.id}")
    if detection is not None:
        typer.echo(f"  {detection.summary()}")
    for url in outcome.comment_urls:
        typer.echo(f"  Comment:    {url}")


async def _record(run: Run, config: BenchmarkConfig, settings: Settings) -> Any:
    """Run the pipeline with the default git and GitHub adapters."""
    from benchwatch.notify import GitHubNotifier
    from benchwatch.pipeline import write_benchmark
    from benchwatch.vcs import GitCli

    repo = RepositoryContext.from_env()
    vcs = None if config.external_data_json_path else GitCli(repo, token=config.github_token)

    if not config.github_token:
        return await write_benchmark(run, config, repo, vcs=vcs)

    async with GitHubNotifier(
        repo,
        token=config.github_token,
        api_url=settings.github_api_url,
        timeout=settings.timeout_seconds,
    ) as notifier:
        return await write_benchmark(run, config, repo, vcs=vcs, notifier=notifier)


@app.command()
def show(
    data_file: Annotated[
        Path,
        typer.Argument(help="Path to data.json or data.js."),
    ],
    suite: Annotated[
        str | None,
        typer.Option("--suite", "-s", help="Only show this suite."),
    ] = None,
) -> None:
    """Show the suites stored in a benchmark history file.

    Examples:
        benchwatch show dev/bench/data.js
        benchwatch show cache/data.json --suite "Rust Benchmark"
    """
    from benchwatch.history import load

    if not data_file.exists():
        typer.echo(f"Error: File not found: {data_file}", err=True)
        raise typer.Exit(1)

    try:
        document = load(data_file, script=data_file.suffix == ".js")
    except BenchwatchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    entries = {k: v for k, v in document.entries.items() if suite is None or k == suite}

    if state["json"]:
        summary = {
            "repo_url": document.repo_url,
            "last_update": document.last_update,
            "suites": {
                name: {"runs": len(runs), "latest_commit": runs[-1].commit.id if runs else None}
                for name, runs in entries.items()
            },
        }
        typer.echo(json.dumps(summary, indent=2))
        return

    if not entries:
        typer.echo("No benchmark suites found.")
        return

    typer.echo(f"Repository: {document.repo_url or '-'}")
    for name, runs in entries.items():
        latest = runs[-1].commit.id if runs else "-"
        typer.echo(f"  {name}: {len(runs)} runs (latest: {latest})")


if __name__ == "__main__":
    app()
