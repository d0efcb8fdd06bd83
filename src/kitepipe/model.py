# model.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


Primitive = Union[str, int, float, bool]


@dataclass(eq=False)
class Step:
    """
    Base class for anything that can be placed in a pipeline.

    Steps hash and compare by identity: two steps with the same fields are
    still two different nodes in the dependency graph.

    `dependencies` keeps declaration order (no duplicates) so resolution is
    reproducible across runs.
    """
    dependencies: List["Step"] = field(default_factory=list, init=False, repr=False)
    always: bool = field(default=False, init=False)

    def depends_on(self, *steps: "Step"):
        for s in steps:
            if s not in self.dependencies:
                self.dependencies.append(s)
        return self

    def always_execute(self):
        self.always = True
        return self


@dataclass(eq=False)
class WaitStep:
    """Synchronization point: nothing after it starts until everything before it finished."""
    continue_on_failure: bool = False

    def __str__(self) -> str:
        return "[wait]"


@dataclass(frozen=True)
class Command:
    """A single shell command inside a command step."""
    command: str
    timeout: float = math.inf  # seconds

    def __str__(self) -> str:
        return self.command


def _finite_or_none(value: float) -> Optional[float]:
    if value == math.inf or value == 0:
        return None
    return value


class CommandStep(Step):
    """
    A step running one or more commands.

    Timeout resolution:
      - explicit timeout (with_timeout) wins
      - otherwise the sum of the command timeouts
      - infinite or zero means "no timeout" (None)
    """

    def __init__(
        self,
        command: Union[str, Command, List[Union[str, Command]]],
        label: Optional[str] = None,
    ):
        super().__init__()
        self.commands: List[Command] = []
        self.label = label
        self.parallelism: Optional[int] = None
        self._timeout: Optional[float] = None

        if isinstance(command, list):
            if not command:
                raise ValueError("CommandStep needs at least one command")
            for c in command:
                self.add(c)
        else:
            self.add(command)

    def add(self, command: Union[str, Command]):
        if isinstance(command, str):
            self.commands.append(Command(command))
        elif isinstance(command, Command):
            self.commands.append(command)
        else:
            raise TypeError(f"Expected str or Command, got {type(command).__name__}")
        return self

    def with_timeout(self, timeout: float = math.inf):
        """Override the summed command timeouts (seconds)."""
        self._timeout = timeout
        return self

    def with_parallelism(self, parallelism: int):
        self.parallelism = parallelism
        return self

    @property
    def timeout(self) -> Optional[float]:
        if self._timeout is not None:
            return _finite_or_none(self._timeout)
        if not self.commands:
            return None
        return _finite_or_none(sum(c.timeout for c in self.commands))

    def __repr__(self) -> str:
        return f"CommandStep({str(self)!r}, always={self.always})"

    def __str__(self) -> str:
        if self.label:
            return self.label
        return f"<{' && '.join(str(c) for c in self.commands)}>"


class TriggerStep(Step):
    """
    A step that starts a build of another pipeline.

    `build_env` is passed to the triggered build, not to this pipeline.
    """

    def __init__(self, pipeline: "Pipeline", label: Optional[str] = None):
        super().__init__()
        self.pipeline = pipeline
        self.label = label
        self.build_env: Dict[str, Primitive] = {}

    def set_build_env(self, name: str, value: Primitive):
        self.build_env[name] = value
        return self

    def __repr__(self) -> str:
        return f"TriggerStep({str(self)!r}, always={self.always})"

    def __str__(self) -> str:
        return self.label or f"Trigger {self.pipeline.name}"


@dataclass(eq=False)
class Pipeline:
    """A named, ordered collection of steps plus pipeline-level env."""
    name: str
    steps: List[Step] = field(default_factory=list)
    env: Dict[str, Primitive] = field(default_factory=dict)

    def add(self, step: Step):
        self.steps.append(step)
        return self

    def set_env(self, name: str, value: Primitive):
        self.env[name] = value
        return self

    def steps_with_waits(self) -> List[Union[Step, WaitStep]]:
        # Import here to avoid circular import
        from .dag import resolve

        return resolve(self.steps)

    def __str__(self) -> str:
        return self.name
