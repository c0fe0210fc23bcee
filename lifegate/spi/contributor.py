"""
SPI interface for condition contributors.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..context import EvaluationResult, ExecutionContext


@runtime_checkable
class ConditionContributor(Protocol):
    """
    Decides whether a unit may run.

    Implemented by extensions; class-level and method-level conditions
    look the same here. Which ones apply to a unit is decided by whoever
    builds the contributor list.
    """

    def evaluate(self, context: ExecutionContext) -> EvaluationResult: ...
