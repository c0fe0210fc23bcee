"""
Condition evaluation.

Contributors are consulted in the order they are supplied. The first
disabled verdict wins and nothing after it runs; a unit excluded once
cannot be re-enabled by a later contributor. No contributors, or only
enabling ones, means the unit runs.

A contributor that raises is not a disabled verdict: the exception goes
to the caller untouched and the runner reports it as an execution error.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

import structlog

from .context import ENABLED, EvaluationResult, ExecutionContext
from .errors import ContributorFault
from .spi.contributor import ConditionContributor

LOGGER = structlog.get_logger(__name__)


class ConditionEvaluator:
    def evaluate(
        self,
        contributors: Iterable[ConditionContributor],
        context: ExecutionContext,
    ) -> EvaluationResult:
        for position, contributor in enumerate(contributors):
            if not callable(getattr(contributor, "evaluate", None)):
                raise ContributorFault(
                    f"Contributor at position {position} has no evaluate().",
                    details=_fault_details(contributor, position, context),
                )

            result = contributor.evaluate(context)

            if not isinstance(result, EvaluationResult):
                raise ContributorFault(
                    f"Contributor {_name(contributor)} returned "
                    f"{type(result).__name__}, expected EvaluationResult.",
                    details=_fault_details(contributor, position, context),
                )
            if result.disabled:
                LOGGER.info(
                    "conditions.disabled",
                    container_id=context.container_id,
                    unit_id=context.unit_id,
                    contributor=_name(contributor),
                    position=position,
                    reason=result.reason,
                )
                return result

        return ENABLED


_DEFAULT_EVALUATOR = ConditionEvaluator()


def evaluate(
    contributors: Iterable[ConditionContributor],
    context: ExecutionContext,
) -> EvaluationResult:
    return _DEFAULT_EVALUATOR.evaluate(contributors, context)


def _name(contributor: object) -> str:
    return getattr(contributor, "name", None) or type(contributor).__name__


def _fault_details(contributor: object, position: int, context: ExecutionContext) -> dict:
    return {
        "contributor": _name(contributor),
        "position": position,
        "container_id": context.container_id,
        "unit_id": context.unit_id,
    }


# ---- built-in contributors ----


class DisabledCondition:
    """Unconditionally disables the units it is supplied for."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason

    def evaluate(self, context: ExecutionContext) -> EvaluationResult:
        if self.reason:
            return EvaluationResult.disabled_result(self.reason)
        return EvaluationResult.disabled_result(f"{context.unit_id} is disabled")


class FunctionCondition:
    """Adapts a plain callable ``context -> EvaluationResult``."""

    def __init__(
        self,
        fn: Callable[[ExecutionContext], EvaluationResult],
        name: Optional[str] = None,
    ) -> None:
        self.fn = fn
        self.name = name or getattr(fn, "__name__", None)

    def evaluate(self, context: ExecutionContext) -> EvaluationResult:
        return self.fn(context)


class OncePerContainerCondition:
    """
    Applies ``inner`` only while the container has no instance yet.

    Once an instance exists (a PER_CLASS container already running) the
    inner condition was already decided for this container, so later
    units are enabled with an informational reason.
    """

    def __init__(self, inner: ConditionContributor) -> None:
        self.inner = inner
        self.name = f"once({_name(inner)})"

    def evaluate(self, context: ExecutionContext) -> EvaluationResult:
        if context.has_instance:
            return EvaluationResult.enabled_result(
                f"already evaluated for {context.container_id}"
            )
        return self.inner.evaluate(context)
