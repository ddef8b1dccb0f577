"""Command-line interface for ebookforge.

Responsibilities:
- Expose user-facing commands: `build`, `check`, and `filters`.
- Convert CLI options into `ForgeConfig` and run the orchestrator.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_filter_list,
    echo_plan,
    echo_run_summary,
    exit_with_command_error,
)
from .config import ConfigLoader, ForgeConfig
from .errors import PipelineStageError
from .pipeline import EbookForge, FilterRegistry
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="ebookforge",
    no_args_is_help=True,
    help="Build e-books from a spec of chapters and filter chains.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
SpecsDirOption = Annotated[
    Path | None,
    typer.Option("--specs-dir", help="Directory searched for specs given by name."),
]
CacheDirOption = Annotated[
    Path | None,
    typer.Option("--cache-dir", help="Cache directory (overrides config file value)."),
]
OutputDirOption = Annotated[
    Path | None,
    typer.Option("--output-dir", help="Output directory (overrides config file value)."),
]
FiltersDirOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--filters-dir",
        help="Directory of extra filter modules; repeat to add several.",
    ),
]
DebugOption = Annotated[
    bool | None,
    typer.Option("--debug/--no-debug", help="Log chain internals and element purges."),
]


def _load_config(config_file: Path | None) -> ForgeConfig:
    """Load a YAML config file, or environment defaults when none is given."""

    if config_file is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix or unset the offending `EBOOKFORGE_*` variable.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_file)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_file}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_file}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_config(
    config_file: Path | None,
    specs_dir: Path | None = None,
    cache_dir: Path | None = None,
    output_dir: Path | None = None,
    filter_dirs: list[Path] | None = None,
    decode_entities: bool | None = None,
    debug: bool | None = None,
) -> ForgeConfig:
    """Resolve effective config from file/env defaults and explicit CLI overrides."""

    return _load_config(config_file).with_overrides(
        specs_dir=specs_dir,
        cache_dir=cache_dir,
        output_dir=output_dir,
        filter_dirs=filter_dirs or None,
        decode_entities=decode_entities,
        debug=debug,
    )


@app.command("build")
def build_command(
    spec: Annotated[str, typer.Argument(help="Spec file path, or a name under `--specs-dir`.")],
    config_file: ConfigOption = None,
    specs_dir: SpecsDirOption = None,
    cache_dir: CacheDirOption = None,
    output_dir: OutputDirOption = None,
    filter_dirs: FiltersDirOption = None,
    decode_entities: Annotated[
        bool | None,
        typer.Option(
            "--decode-entities/--keep-entities",
            help=(
                "Skip `clean`'s unescape pass over entities left after parsing. "
                "The default (--keep-entities) runs it."
            ),
        ),
    ] = None,
    debug: DebugOption = None,
) -> None:
    """Run every chapter chain, then the output stage."""

    try:
        config = _resolve_config(
            config_file,
            specs_dir=specs_dir,
            cache_dir=cache_dir,
            output_dir=output_dir,
            filter_dirs=filter_dirs,
            decode_entities=decode_entities,
            debug=debug,
        )
        run_logger = RunLogger(debug=config.debug)
        forge = EbookForge(FilterRegistry.discover(config.filter_dirs), run_logger=run_logger)
        summary = forge.run(forge.load_spec(spec, config), config)
    except Exception as exc:
        exit_with_command_error("build", exc)

    echo_run_summary(summary)
    typer.echo(f"Output: {config.output_dir}")


@app.command("check")
def check_command(
    spec: Annotated[str, typer.Argument(help="Spec file path, or a name under `--specs-dir`.")],
    config_file: ConfigOption = None,
    specs_dir: SpecsDirOption = None,
    cache_dir: CacheDirOption = None,
    filter_dirs: FiltersDirOption = None,
) -> None:
    """Validate a spec and print its source groups without running any filter."""

    try:
        config = _resolve_config(
            config_file,
            specs_dir=specs_dir,
            cache_dir=cache_dir,
            filter_dirs=filter_dirs,
        )
        forge = EbookForge(FilterRegistry.discover(config.filter_dirs))
        plan = forge.check(forge.load_spec(spec, config), config)
    except Exception as exc:
        exit_with_command_error("check", exc)

    echo_plan(plan)


@app.command("filters")
def filters_command(
    config_file: ConfigOption = None,
    filter_dirs: FiltersDirOption = None,
) -> None:
    """List every available filter identifier."""

    try:
        config = _resolve_config(config_file, filter_dirs=filter_dirs)
        registry = FilterRegistry.discover(config.filter_dirs)
    except Exception as exc:
        exit_with_command_error("filters", exc)

    echo_filter_list(registry.identifiers())


def main() -> None:
    """Run the ebookforge CLI application."""

    app()


if __name__ == "__main__":
    main()
