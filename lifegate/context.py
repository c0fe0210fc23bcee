"""
Values exchanged between the engine, the evaluator and contributors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .declarations import LifecycleMode
from .instances import ContainerInstance


@dataclass(frozen=True)
class EvaluationResult:
    """
    Verdict of a condition.

    A disabled result carries the reason its contributor supplied; an
    enabled one may carry an informational reason or none.
    """
    enabled: bool
    reason: Optional[str] = None

    @classmethod
    def enabled_result(cls, reason: Optional[str] = None) -> "EvaluationResult":
        return cls(enabled=True, reason=reason)

    @classmethod
    def disabled_result(cls, reason: Optional[str] = None) -> "EvaluationResult":
        return cls(enabled=False, reason=reason)

    @property
    def disabled(self) -> bool:
        return not self.enabled

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "reason": self.reason}

    def __str__(self) -> str:
        label = "enabled" if self.enabled else "disabled"
        return f"{label}: {self.reason}" if self.reason else label


ENABLED = EvaluationResult.enabled_result()


@dataclass(frozen=True)
class ExecutionContext:
    """Read-only snapshot handed to contributors, rebuilt for every call."""
    container_id: str
    unit_id: str
    mode: LifecycleMode
    instance: Optional[ContainerInstance] = None

    @property
    def has_instance(self) -> bool:
        return self.instance is not None

    @property
    def is_container_level(self) -> bool:
        """True when the unit being gated is the container itself."""
        return self.unit_id == self.container_id
