"""
Execution gate.

The single surface the runner talks to. Wires the container registry,
mode resolver, instance manager and condition evaluator together.

Typical runner loop for one container:

    for unit in units:
        verdict = gate.evaluate(container, unit, contributors_for(unit))
        if verdict.disabled:
            report_skipped(unit, verdict.reason)
            continue
        instance = gate.instance_for(container, unit)
        try:
            run(unit, instance)
        finally:
            gate.unit_completed(container, unit)
    if gate.current(container) is not None:
        gate.finalize(container)

Evaluation and instantiation are independent calls: evaluate() never
creates an instance, it only shows contributors the current one.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Union

from .conditions import ConditionEvaluator
from .config import GateSettings
from .context import EvaluationResult, ExecutionContext
from .declarations import ContainerDeclaration, ContainerRegistry, LifecycleMode
from .instances import ContainerInstance, InstanceManager, InstanceState
from .lifecycle import LifecycleResolver, Resolution
from .spi.contributor import ConditionContributor


class ExecutionGate:
    def __init__(
        self,
        registry: Optional[ContainerRegistry] = None,
        default_mode: LifecycleMode = LifecycleMode.PER_METHOD,
        evaluator: Optional[ConditionEvaluator] = None,
    ) -> None:
        self.registry = registry if registry is not None else ContainerRegistry()
        self.resolver = LifecycleResolver(self.registry, default_mode=default_mode)
        self.instances = InstanceManager(self.resolver)
        self.evaluator = evaluator or ConditionEvaluator()

    @classmethod
    def from_settings(
        cls,
        settings: GateSettings,
        registry: Optional[ContainerRegistry] = None,
    ) -> "ExecutionGate":
        return cls(registry=registry, default_mode=settings.default_lifecycle)

    # ---- declarations ----

    def declare(
        self,
        container_id: str,
        mode: Optional[Union[LifecycleMode, str]] = None,
        parent_id: Optional[str] = None,
    ) -> ContainerDeclaration:
        return self.registry.declare(container_id, mode=mode, parent_id=parent_id)

    def resolve_mode(self, container_id: str) -> LifecycleMode:
        return self.resolver.resolve_mode(container_id)

    def explain(self, container_id: str) -> Resolution:
        return self.resolver.explain(container_id)

    # ---- conditions ----

    def context_for(self, container_id: str, unit_id: str) -> ExecutionContext:
        return ExecutionContext(
            container_id=container_id,
            unit_id=unit_id,
            mode=self.resolver.resolve_mode(container_id),
            instance=self.instances.current(container_id),
        )

    def evaluate(
        self,
        container_id: str,
        unit_id: str,
        contributors: Iterable[ConditionContributor],
    ) -> EvaluationResult:
        return self.evaluator.evaluate(contributors, self.context_for(container_id, unit_id))

    # ---- instances ----

    def instance_for(self, container_id: str, unit_id: str) -> ContainerInstance:
        return self.instances.instance_for(container_id, unit_id)

    def unit_completed(self, container_id: str, unit_id: str) -> Optional[ContainerInstance]:
        return self.instances.unit_completed(container_id, unit_id)

    def finalize(self, container_id: str) -> ContainerInstance:
        return self.instances.finalize(container_id)

    def current(self, container_id: str) -> Optional[ContainerInstance]:
        return self.instances.current(container_id)

    def state(self, container_id: str) -> InstanceState:
        return self.instances.state(container_id)

    def status(self) -> Dict[str, Any]:
        """Snapshot of every declared container for debugging/logging."""
        containers: Dict[str, Any] = {}
        for container_id in self.registry:
            current = self.instances.current(container_id)
            containers[container_id] = {
                "mode": self.resolver.resolve_mode(container_id).value,
                "state": self.instances.state(container_id).value,
                "generation": self.instances.generation(container_id),
                "instance": current.to_dict() if current else None,
            }
        return {
            "default_mode": self.resolver.default_mode.value,
            "containers": containers,
        }
