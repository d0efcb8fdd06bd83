# src/kitepipe/dsl.py
from __future__ import annotations

import math
from typing import Dict, List, Optional, Union

from .model import Command, CommandStep, Pipeline, Primitive, Step, TriggerStep


# ---------------------------------------------------------------------
# Command helper
# ---------------------------------------------------------------------

def cmd(command: str, timeout: float = math.inf) -> Command:
    """Create a command with an optional timeout (seconds)."""
    return Command(command=command, timeout=timeout)


# ---------------------------------------------------------------------
# Functional Step helper
# ---------------------------------------------------------------------

def step(
    *commands: Union[str, Command],  # allow: step("make", cmd("make test", 600))
    label: Optional[str] = None,
    needs: Optional[List[Step]] = None,
    always: bool = False,
    timeout: Optional[float] = None,
    parallelism: Optional[int] = None,
) -> CommandStep:
    if not commands:
        raise ValueError(f"step(label={label!r}) must have at least one command")

    s = CommandStep(list(commands), label=label)
    if needs:
        s.depends_on(*needs)
    if always:
        s.always_execute()
    if timeout is not None:
        s.with_timeout(timeout)
    if parallelism is not None:
        s.with_parallelism(parallelism)
    return s


def trigger(
    target: Pipeline,
    *,
    label: Optional[str] = None,
    needs: Optional[List[Step]] = None,
    always: bool = False,
    env: Optional[Dict[str, Primitive]] = None,  # build env of the triggered pipeline
) -> TriggerStep:
    """Create a step that triggers a build of `target`."""
    t = TriggerStep(target, label=label)
    if needs:
        t.depends_on(*needs)
    if always:
        t.always_execute()
    for key, value in (env or {}).items():
        t.set_build_env(key, value)
    return t


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class StepBuilder:
    def __init__(self, label: Optional[str] = None):
        self._label = label
        self._commands: list[Command] = []
        self._needs: list[Step] = []
        self._always = False
        self._timeout: Optional[float] = None
        self._parallelism: Optional[int] = None

    def run(self, command: str, timeout: float = math.inf):
        self._commands.append(Command(command, timeout))
        return self

    def labelled(self, label: str):
        self._label = label
        return self

    def depends_on(self, *steps: Step):
        self._needs.extend(steps)
        return self

    def always_execute(self):
        self._always = True
        return self

    def with_timeout(self, timeout: float = math.inf):
        self._timeout = timeout
        return self

    def with_parallelism(self, parallelism: int):
        self._parallelism = parallelism
        return self

    def build(self) -> CommandStep:
        if not self._commands:
            raise ValueError(f"Step '{self._label}' has no commands")

        return step(
            *self._commands,
            label=self._label,
            needs=self._needs,
            always=self._always,
            timeout=self._timeout,
            parallelism=self._parallelism,
        )


def build(label: Optional[str] = None) -> StepBuilder:
    """Convenience: build('test').run('pytest').build()"""
    return StepBuilder(label)


# ---------------------------------------------------------------------
# Pipeline helper (single-file story)
# ---------------------------------------------------------------------

def pipeline(name: str, *steps: Step, env: Optional[Dict[str, Primitive]] = None) -> Pipeline:
    """
    Pipeline definition helper.

    Users can write:
        from kitepipe import pipeline, step

        def pipeline_definition():
            lint = step("ruff check .", label="lint")
            return pipeline(
                "my-service",
                lint,
                step("pytest -q", label="test", needs=[lint]),
            )

    Or define PIPELINE directly:
        PIPELINE = pipeline("my-service", ...)
    """
    p = Pipeline(name=name)
    for s in steps:
        p.add(s)
    for key, value in (env or {}).items():
        p.set_env(key, value)
    return p
