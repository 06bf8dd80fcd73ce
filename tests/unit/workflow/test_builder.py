"""Tests for StepBuilder, Step and Workflow construction."""

import dataclasses

import pytest

from stepflow.errors import WorkflowValidationError
from stepflow.workflow import Step, Workflow, create_step, define_workflow


async def noop(ctx):
    return None


class TestStepBuilder:
    """Tests for the fluent builder."""

    def test_builds_step_with_all_options(self):
        """Test every option lands on the built step."""

        def cond(ctx):
            return True

        step = create_step("fetch").run(noop).condition(cond).retry(3).timeout(5000).build()

        assert step.id == "fetch"
        assert step.run is noop
        assert step.condition is cond
        assert step.retry == 3
        assert step.timeout == 5000
        assert step.max_attempts == 4

    def test_defaults(self):
        """Test optional fields default to None."""
        step = create_step("s").run(noop).build()
        assert step.condition is None
        assert step.retry is None
        assert step.timeout is None
        assert step.max_attempts == 1

    @pytest.mark.parametrize("step_id", ["", None, 7])
    def test_rejects_invalid_id(self, step_id):
        """Test the id must be a non-empty string."""
        with pytest.raises(WorkflowValidationError, match="Step id must be a non-empty string"):
            create_step(step_id)

    @pytest.mark.parametrize("count", [-1, 1.5, "2", True])
    def test_rejects_invalid_retry(self, count):
        """Test retry must be a non-negative integer."""
        with pytest.raises(WorkflowValidationError, match="non-negative integer"):
            create_step("s").retry(count)

    def test_accepts_zero_retry(self):
        """Test retry(0) is allowed and means one attempt."""
        assert create_step("s").run(noop).retry(0).build().max_attempts == 1

    @pytest.mark.parametrize("ms", [0, -5, 2.5, False])
    def test_rejects_invalid_timeout(self, ms):
        """Test timeout must be a positive integer."""
        with pytest.raises(WorkflowValidationError, match="positive integer"):
            create_step("s").timeout(ms)

    def test_requires_run_function(self):
        """Test build() without run() fails."""
        with pytest.raises(WorkflowValidationError, match="must have a run function"):
            create_step("lonely").build()

    def test_rejects_non_callable_run(self):
        """Test run() rejects non-callables immediately."""
        with pytest.raises(WorkflowValidationError):
            create_step("s").run("not callable")

    def test_step_is_immutable(self):
        """Test a built step cannot be modified."""
        step = create_step("s").run(noop).build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            step.retry = 5

    def test_direct_step_construction_is_validated(self):
        """Test Step(...) applies the same rules as the builder."""
        with pytest.raises(WorkflowValidationError):
            Step(id="s", run=noop, timeout=0)


class TestWorkflow:
    """Tests for workflow construction."""

    def test_define_workflow(self):
        """Test a valid workflow keeps name and step order."""
        steps = [create_step(name).run(noop).build() for name in ("a", "b", "c")]
        workflow = define_workflow("pipeline", steps)

        assert workflow.name == "pipeline"
        assert workflow.step_ids == ["a", "b", "c"]
        assert isinstance(workflow.steps, tuple)
        assert len(workflow) == 3
        assert workflow.get_step("b") is steps[1]
        assert workflow.get_step("zzz") is None

    def test_rejects_duplicate_step_ids(self):
        """Test duplicate ids fail at construction."""
        steps = [create_step("same").run(noop).build(), create_step("same").run(noop).build()]
        with pytest.raises(WorkflowValidationError, match="Duplicate step id: same"):
            define_workflow("dupes", steps)

    def test_rejects_empty_steps(self):
        """Test a workflow needs at least one step."""
        with pytest.raises(WorkflowValidationError, match="at least one step"):
            Workflow("empty", [])

    @pytest.mark.parametrize("name", ["", None])
    def test_rejects_invalid_name(self, name):
        """Test the name must be a non-empty string."""
        with pytest.raises(WorkflowValidationError, match="name must be a non-empty string"):
            define_workflow(name, [create_step("s").run(noop).build()])

    def test_reports_every_issue(self):
        """Test all issues are collected into one error."""
        steps = [create_step("x").run(noop).build(), create_step("x").run(noop).build()]
        with pytest.raises(WorkflowValidationError) as exc_info:
            define_workflow("", steps)

        paths = [issue.path for issue in exc_info.value.issues]
        assert paths == ["name", "steps[1].id"]

    def test_steps_snapshot_is_independent(self):
        """Test mutating the input list doesn't change the workflow."""
        steps = [create_step("a").run(noop).build()]
        workflow = define_workflow("snap", steps)
        steps.append(create_step("b").run(noop).build())

        assert workflow.step_ids == ["a"]
