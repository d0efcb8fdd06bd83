from .dsl import cmd, step, trigger, pipeline, StepBuilder, build
from .dag import CyclicDependency, sort_steps, insert_waits, apply_always, resolve
from .model import Command, CommandStep, Pipeline, Step, TriggerStep, WaitStep

__all__ = [
    "cmd", "step", "trigger", "pipeline", "StepBuilder", "build",
    "CyclicDependency", "sort_steps", "insert_waits", "apply_always", "resolve",
    "Command", "CommandStep", "Pipeline", "Step", "TriggerStep", "WaitStep",
]
