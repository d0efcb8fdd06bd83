"""Tests for the pipeline authoring helpers."""

import pytest

from kitepipe import Pipeline, build, cmd, pipeline, step, trigger
from kitepipe.model import CommandStep, TriggerStep


class TestStepHelper:
    def test_requires_a_command(self):
        with pytest.raises(ValueError):
            step(label="empty")

    def test_all_options(self):
        lint = step("ruff check .")
        s = step(
            "pytest",
            cmd("coverage xml", timeout=30),
            label="test",
            needs=[lint],
            always=True,
            timeout=300,
            parallelism=3,
        )
        assert isinstance(s, CommandStep)
        assert [str(c) for c in s.commands] == ["pytest", "coverage xml"]
        assert s.label == "test"
        assert s.dependencies == [lint]
        assert s.always is True
        assert s.timeout == 300
        assert s.parallelism == 3

    def test_command_timeouts_used_without_override(self):
        s = step(cmd("a", 10), cmd("b", 20))
        assert s.timeout == 30


class TestTriggerHelper:
    def test_all_options(self):
        deploy = pipeline("deploy")
        smoke = step("make smoke")
        t = trigger(deploy, label="deploy prod", needs=[smoke], always=True, env={"STAGE": "prod"})
        assert isinstance(t, TriggerStep)
        assert t.pipeline is deploy
        assert str(t) == "deploy prod"
        assert t.dependencies == [smoke]
        assert t.always is True
        assert t.build_env == {"STAGE": "prod"}

    def test_defaults(self):
        t = trigger(pipeline("docs"))
        assert str(t) == "Trigger docs"
        assert t.dependencies == []
        assert t.always is False
        assert t.build_env == {}


class TestStepBuilder:
    def test_build(self):
        lint = step("ruff check .")
        s = (
            build("test")
            .run("pytest", timeout=120)
            .depends_on(lint)
            .always_execute()
            .with_parallelism(2)
            .build()
        )
        assert str(s) == "test"
        assert s.dependencies == [lint]
        assert s.always is True
        assert s.timeout == 120
        assert s.parallelism == 2

    def test_labelled_and_timeout_override(self):
        s = build().labelled("pkg").run("make dist", 60).with_timeout(10).build()
        assert str(s) == "pkg"
        assert s.timeout == 10

    def test_build_without_commands(self):
        with pytest.raises(ValueError):
            build("nothing").build()


class TestPipelineHelper:
    def test_steps_and_env(self):
        a, b = step("a"), step("b")
        p = pipeline("svc", a, b, env={"TZ": "UTC", "RETRIES": 2})
        assert isinstance(p, Pipeline)
        assert p.name == "svc"
        assert p.steps == [a, b]
        assert p.env == {"TZ": "UTC", "RETRIES": 2}

    def test_no_env(self):
        assert pipeline("svc").env == {}
