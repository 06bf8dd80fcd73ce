"""Workflow definitions: steps, workflows, context and validation."""

from .builder import StepBuilder, create_step
from .context import WorkflowContext
from .types import ConditionFunction, Step, StepFunction, Workflow, define_workflow
from .validator import WorkflowValidator

__all__ = [
    "Step",
    "Workflow",
    "WorkflowContext",
    "StepBuilder",
    "WorkflowValidator",
    "StepFunction",
    "ConditionFunction",
    "create_step",
    "define_workflow",
]
