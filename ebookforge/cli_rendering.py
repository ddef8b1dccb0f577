"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
run summaries, plan summaries, and filter listings.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import RunSummary
from .pipeline.orchestrator import BuildPlan


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_run_summary(summary: RunSummary) -> None:
    """Print chapter/group counts and whether the output stage ran."""

    typer.echo(f"Spec: {summary.spec_name}")
    typer.echo(
        f"Chapters: {summary.completed_chapters}/{summary.chapter_count} "
        f"in {summary.source_groups} source group(s)"
    )
    typer.echo(f"Cached entries at start: {summary.cached_entries}")
    typer.echo(f"Output stage: {'done' if summary.output_fired else 'not reached'}")


def echo_plan(plan: BuildPlan) -> None:
    """Print each source group with its chapters' resolved filter chains."""

    for group in plan.groups:
        typer.echo(f"{group.src}")
        for chapter_plan in group.plans:
            chain = " -> ".join(unit.filter_id for unit in chapter_plan.units)
            typer.echo(f"  {chapter_plan.chapter.id}. {chapter_plan.chapter.title} [{chain}]")
    output_chain = " -> ".join(unit.filter_id for unit in plan.output_units)
    typer.echo(f"Output: [{output_chain}]")


def echo_filter_list(identifiers: list[str]) -> None:
    """Print one filter identifier per line."""

    for identifier in identifiers:
        typer.echo(identifier)
