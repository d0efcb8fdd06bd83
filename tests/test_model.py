"""Tests for step, command and pipeline model types."""

import math

import pytest

from kitepipe.model import Command, CommandStep, Pipeline, TriggerStep, WaitStep


class TestStepIdentity:
    def test_equal_fields_are_still_distinct_steps(self):
        a = CommandStep("make", label="build")
        b = CommandStep("make", label="build")
        assert a != b
        assert len({a, b}) == 2

    def test_depends_on_deduplicates_and_keeps_order(self):
        a, b, c = CommandStep("a"), CommandStep("b"), CommandStep("c")
        c.depends_on(b, a).depends_on(b)
        assert c.dependencies == [b, a]

    def test_always_execute(self):
        s = CommandStep("notify")
        assert s.always is False
        assert s.always_execute() is s
        assert s.always is True


class TestCommandStep:
    def test_from_string(self):
        s = CommandStep("make test")
        assert s.commands == [Command("make test")]

    def test_from_list(self):
        s = CommandStep(["make", Command("make test", 60)])
        assert [str(c) for c in s.commands] == ["make", "make test"]

    def test_empty_list_rejected(self):
        with pytest.raises(ValueError):
            CommandStep([])

    def test_add_rejects_other_types(self):
        with pytest.raises(TypeError):
            CommandStep("make").add(42)

    def test_str_prefers_label(self):
        assert str(CommandStep(["make", "make test"])) == "<make && make test>"
        assert str(CommandStep("make", label="build")) == "build"

    def test_timeout_defaults_to_none(self):
        assert CommandStep("make").timeout is None

    def test_timeout_sums_commands(self):
        s = CommandStep([Command("a", 60), Command("b", 30)])
        assert s.timeout == 90

    def test_infinite_command_means_no_timeout(self):
        s = CommandStep([Command("a", 60), Command("b")])
        assert s.timeout is None

    def test_explicit_timeout_wins(self):
        s = CommandStep([Command("a", 60)]).with_timeout(120)
        assert s.timeout == 120

    def test_explicit_zero_or_infinite_timeout_clears(self):
        assert CommandStep(Command("a", 60)).with_timeout(0).timeout is None
        assert CommandStep(Command("a", 60)).with_timeout().timeout is None
        assert CommandStep(Command("a", 60)).with_timeout(math.inf).timeout is None

    def test_parallelism(self):
        assert CommandStep("a").with_parallelism(4).parallelism == 4


class TestWaitStep:
    def test_defaults(self):
        w = WaitStep()
        assert w.continue_on_failure is False
        assert str(w) == "[wait]"

    def test_waits_are_distinct(self):
        assert WaitStep() != WaitStep()


class TestTriggerStep:
    def test_str_defaults_to_target_name(self):
        t = TriggerStep(Pipeline("deploy"))
        assert str(t) == "Trigger deploy"
        assert str(TriggerStep(Pipeline("deploy"), label="ship it")) == "ship it"

    def test_build_env_chain(self):
        t = TriggerStep(Pipeline("deploy")).set_build_env("SHA", "abc").set_build_env("N", 2)
        assert t.build_env == {"SHA": "abc", "N": 2}

    def test_build_env_separate_from_pipeline_env(self):
        target = Pipeline("deploy")
        TriggerStep(target).set_build_env("SHA", "abc")
        assert target.env == {}

    def test_resolves_alongside_command_steps(self):
        build = CommandStep("make", label="build")
        deploy = TriggerStep(Pipeline("deploy")).depends_on(build)
        report = CommandStep("report", label="report").depends_on(deploy).always_execute()
        out = Pipeline("svc").add(build).add(deploy).add(report).steps_with_waits()
        assert [str(x) for x in out] == ["build", "[wait]", "Trigger deploy", "[wait]", "report"]
        assert out[3].continue_on_failure is True


class TestPipeline:
    def test_add_and_env_chain(self):
        a = CommandStep("a")
        p = Pipeline("svc").add(a).set_env("CI", True)
        assert p.steps == [a]
        assert p.env == {"CI": True}
        assert str(p) == "svc"

    def test_steps_with_waits(self):
        a, b = CommandStep("a", label="a"), CommandStep("b", label="b")
        b.depends_on(a)
        out = Pipeline("svc").add(a).add(b).steps_with_waits()
        assert [str(x) for x in out] == ["a", "[wait]", "b"]

    def test_out_of_band_step_joins_pipeline(self):
        a, b = CommandStep("a"), CommandStep("b")
        b.depends_on(a)
        p = Pipeline("svc").add(b)
        p.steps_with_waits()
        assert p.steps == [b, a]
