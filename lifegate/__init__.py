"""
lifegate - lifecycle and gating core of a test execution engine

For every test unit it decides:
- how many instances of the enclosing container exist, and when they are
  created and destroyed (PER_METHOD or PER_CLASS)
- whether the unit runs at all, from an ordered list of condition
  contributors (first disable wins)

Discovery, extension registration and reporting live elsewhere; this
package only takes their inputs and returns decisions.
"""

from .declarations import ContainerDeclaration, ContainerRegistry, LifecycleMode, load_declarations
from .lifecycle import LifecycleResolver, Resolution
from .instances import ContainerInstance, InstanceManager, InstanceState
from .context import ENABLED, EvaluationResult, ExecutionContext
from .conditions import (
    ConditionEvaluator,
    DisabledCondition,
    FunctionCondition,
    OncePerContainerCondition,
    evaluate,
)
from .errors import ContributorFault, IllegalLifecycleTransition, LifegateError
from .gate import ExecutionGate
from .spi import ConditionContributor

__all__ = [
    "LifecycleMode",
    "ContainerDeclaration",
    "ContainerRegistry",
    "load_declarations",
    "LifecycleResolver",
    "Resolution",
    "ContainerInstance",
    "InstanceManager",
    "InstanceState",
    "ENABLED",
    "EvaluationResult",
    "ExecutionContext",
    "ConditionContributor",
    "ConditionEvaluator",
    "DisabledCondition",
    "FunctionCondition",
    "OncePerContainerCondition",
    "evaluate",
    "LifegateError",
    "IllegalLifecycleTransition",
    "ContributorFault",
    "ExecutionGate",
]
