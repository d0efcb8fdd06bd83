# kitepipe_pipeline.py
# Pipeline for kitepipe itself: lint, test, package, notify
from __future__ import annotations
from kitepipe import pipeline, step, cmd


def pipeline_definition():
    lint = step("ruff check .", label="lint")
    fmt = step("ruff format --check .", label="format-check")

    test = step(
        "pip install -e .[test]",
        cmd("pytest -q", timeout=600),
        label="test",
        needs=[lint],
        parallelism=2,
    )

    package = step("python -m build", label="package", needs=[test, fmt])

    # Runs even when something upstream failed
    notify = step("./scripts/notify.sh", label="notify", needs=[package], always=True)

    return pipeline(
        "kitepipe",
        lint,
        fmt,
        test,
        package,
        notify,
        env={"PYTHONUNBUFFERED": "1"},
    )
