# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from kitepipe.dag import CyclicDependency, batches, resolve
from kitepipe.loader import load_pipeline
from kitepipe.model import Pipeline, WaitStep
from kitepipe.ui.console import Console, set_console, get_console


DEFAULT_PIPELINE_FILE = "kitepipe_pipeline.py"


def find_pipeline_files(root: Path = Path(".")) -> list[Path]:
    """
    Find all pipeline files in a directory.

    Returns:
        List of Path objects for pipeline files
    """
    pipeline_files = []

    default_pipeline = root / DEFAULT_PIPELINE_FILE
    if default_pipeline.exists():
        pipeline_files.append(default_pipeline)

    for path in root.glob("*_pipeline.py"):
        if path != default_pipeline:
            pipeline_files.append(path)

    return sorted(pipeline_files)


def discover_pipeline(pipeline_arg: str | None) -> Path:
    """
    Discover pipeline file from argument or default.

    Args:
        pipeline_arg: Optional pipeline argument from CLI

    Returns:
        Path to pipeline file

    Raises:
        SystemExit: If the pipeline cannot be found or is ambiguous
    """
    console = get_console()

    if pipeline_arg:
        pipeline_path = Path(pipeline_arg)
        if not pipeline_path.exists() and pipeline_path.suffix != ".py":
            pipeline_path = Path(str(pipeline_path) + ".py")
        if not pipeline_path.exists():
            console.print_error(
                "Pipeline file not found",
                f"Could not find pipeline file: {pipeline_arg}",
                suggestion="Create a pipeline file or specify a different path:\n  kitepipe plan --pipeline my_pipeline.py",
            )
            sys.exit(1)
        return pipeline_path

    pipeline_files = find_pipeline_files()

    if len(pipeline_files) == 0:
        console.print_error(
            "No pipeline file found",
            "Could not find any pipeline files.",
            details=[
                "Looked for:",
                f"  {DEFAULT_PIPELINE_FILE}",
                "  *_pipeline.py",
            ],
            suggestion=f"Create a pipeline file:\n  {DEFAULT_PIPELINE_FILE}\n\nOr specify a pipeline explicitly:\n  kitepipe plan --pipeline my_pipeline.py",
        )
        sys.exit(1)

    if len(pipeline_files) > 1:
        file_list = "\n".join(f"  {f}" for f in pipeline_files)
        console.print_error(
            "Multiple pipeline files found",
            "Found multiple pipeline files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a pipeline explicitly:\n  kitepipe plan --pipeline {DEFAULT_PIPELINE_FILE}",
        )
        sys.exit(1)

    return pipeline_files[0]


def _load_or_exit(ctx, pipeline_path: Path) -> Pipeline:
    console = get_console()
    try:
        pl = load_pipeline(pipeline_path)
    except Exception as e:
        console.print_error(
            "Failed to load pipeline",
            f"Could not load pipeline from {pipeline_path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)
    console.print_debug(f"Loaded pipeline '{pl}' with {len(pl.steps)} step(s) from {pipeline_path}")
    return pl


def _report_cycle(e: CyclicDependency) -> None:
    get_console().print_error(
        "Cyclic dependency",
        "The pipeline's step dependencies form a cycle; no execution order exists.",
        details=[str(e)],
        suggestion="Remove one of the depends_on() links on the cycle.",
    )


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """kitepipe — resolve step dependencies into wait-separated batches."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--pipeline",
    "pipeline_arg",
    default=None,
    help=f"Pipeline file path (defaults to {DEFAULT_PIPELINE_FILE} if present)",
)
@click.option("--show-deps/--no-show-deps", default=False, show_default=True, help="List each step's dependencies")
@click.pass_context
def plan(ctx, pipeline_arg, show_deps):
    """Print the resolved execution plan of a pipeline."""
    console = get_console()

    pipeline_path = discover_pipeline(pipeline_arg)
    pl = _load_or_exit(ctx, pipeline_path)

    try:
        sequence = resolve(pl.steps)
    except CyclicDependency as e:
        _report_cycle(e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    console.print_plan_started(
        pipeline=str(pl),
        source=pipeline_path.name,
        step_count=sum(1 for item in sequence if not isinstance(item, WaitStep)),
    )

    groups = batches(sequence)
    for idx, (opener, steps) in enumerate(groups, start=1):
        if opener is not None:
            console.print_wait(opener)
        console.print_batch(idx, steps, show_deps=show_deps)

    waits = sum(1 for item in sequence if isinstance(item, WaitStep))
    console.print_summary(
        steps=len(sequence) - waits,
        waits=waits,
        batches=len(groups),
    )


@cli.command()
@click.option(
    "--pipeline",
    "pipeline_arg",
    default=None,
    help=f"Pipeline file path (defaults to {DEFAULT_PIPELINE_FILE} if present)",
)
@click.pass_context
def check(ctx, pipeline_arg):
    """Check that a pipeline's dependencies can be resolved."""
    console = get_console()

    pipeline_path = discover_pipeline(pipeline_arg)
    pl = _load_or_exit(ctx, pipeline_path)

    try:
        sequence = resolve(pl.steps)
    except CyclicDependency as e:
        _report_cycle(e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    steps = sum(1 for item in sequence if not isinstance(item, WaitStep))
    console.print_check_ok(str(pl), steps)


if __name__ == "__main__":
    cli()
