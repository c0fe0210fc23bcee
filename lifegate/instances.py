"""
Container instance state machine.

Each container is either NO_INSTANCE or ACTIVE. The manager only decides
*whether* a new instance is needed and keeps the bookkeeping; the engine
owns the instance while it is current and runs the actual setup and
teardown hooks.

    NO_INSTANCE --instance_for--> ACTIVE (generation + 1)
    ACTIVE      --instance_for--> ACTIVE (PER_CLASS: same instance)
    ACTIVE      --finalize------> NO_INSTANCE

A PER_CLASS instance is shared by every unit of the container, including
units the engine runs in parallel. Nothing here serializes access to the
state held by that instance; callers running such units concurrently
must synchronize it themselves.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import structlog

from .declarations import LifecycleMode
from .errors import IllegalLifecycleTransition
from .lifecycle import LifecycleResolver

LOGGER = structlog.get_logger(__name__)


class InstanceState(str, Enum):
    NO_INSTANCE = "no_instance"
    ACTIVE = "active"


class LifecycleEventType(str, Enum):
    CREATED = "created"
    REUSED = "reused"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class ContainerInstance:
    """One live instantiation of a container's backing state."""
    container_id: str
    generation: int
    mode: LifecycleMode
    unit_id: str  # unit whose request created it

    def to_dict(self) -> dict:
        return {
            "container_id": self.container_id,
            "generation": self.generation,
            "mode": self.mode.value,
            "unit_id": self.unit_id,
        }


@dataclass(frozen=True)
class LifecycleEvent:
    seq: int
    event: LifecycleEventType
    container_id: str
    unit_id: Optional[str]
    generation: int


class InstanceManager:
    def __init__(self, resolver: LifecycleResolver) -> None:
        self.resolver = resolver
        self._active: Dict[str, ContainerInstance] = {}
        self._generations: Dict[str, int] = {}
        self._history: Dict[str, List[LifecycleEvent]] = {}
        self._seq = 0
        self._lock = threading.RLock()

    def instance_for(self, container_id: str, unit_id: str) -> ContainerInstance:
        """
        Return the instance the given unit must run against.

        Creates one when the container has none. Under PER_CLASS an active
        instance is returned unchanged. Under PER_METHOD an active instance
        means the previous unit was never finalized, which is an error.
        """
        mode = self.resolver.resolve_mode(container_id)
        with self._lock:
            current = self._active.get(container_id)
            if current is not None:
                if mode == LifecycleMode.PER_CLASS:
                    self._record(LifecycleEventType.REUSED, container_id, unit_id, current.generation)
                    return current
                raise IllegalLifecycleTransition(
                    f"Container '{container_id}' still holds the PER_METHOD instance "
                    f"created for unit '{current.unit_id}'; finalize it first.",
                    details={
                        "container_id": container_id,
                        "unit_id": unit_id,
                        "active_generation": current.generation,
                    },
                )

            generation = self._generations.get(container_id, 0) + 1
            self._generations[container_id] = generation
            instance = ContainerInstance(
                container_id=container_id,
                generation=generation,
                mode=mode,
                unit_id=unit_id,
            )
            self._active[container_id] = instance
            self._record(LifecycleEventType.CREATED, container_id, unit_id, generation)

        LOGGER.debug(
            "instances.created",
            container_id=container_id,
            unit_id=unit_id,
            generation=generation,
            mode=mode.value,
        )
        return instance

    def finalize(self, container_id: str) -> ContainerInstance:
        """Destroy the active instance. Finalizing twice is a caller bug."""
        with self._lock:
            instance = self._active.pop(container_id, None)
            if instance is None:
                raise IllegalLifecycleTransition(
                    f"Container '{container_id}' has no active instance to finalize.",
                    details={
                        "container_id": container_id,
                        "last_generation": self._generations.get(container_id, 0),
                    },
                )
            self._record(LifecycleEventType.FINALIZED, container_id, None, instance.generation)

        LOGGER.debug(
            "instances.finalized",
            container_id=container_id,
            generation=instance.generation,
        )
        return instance

    def unit_completed(self, container_id: str, unit_id: str) -> Optional[ContainerInstance]:
        """
        Signal that a unit finished (or was cancelled after instance_for).

        PER_METHOD instances are finalized right away; PER_CLASS instances
        live until finalize() is called for the container.
        """
        if self.resolver.resolve_mode(container_id) == LifecycleMode.PER_METHOD:
            return self.finalize(container_id)
        return None

    def current(self, container_id: str) -> Optional[ContainerInstance]:
        with self._lock:
            return self._active.get(container_id)

    def state(self, container_id: str) -> InstanceState:
        with self._lock:
            if container_id in self._active:
                return InstanceState.ACTIVE
            return InstanceState.NO_INSTANCE

    def generation(self, container_id: str) -> int:
        with self._lock:
            return self._generations.get(container_id, 0)

    def history(self, container_id: str) -> List[LifecycleEvent]:
        with self._lock:
            return list(self._history.get(container_id, []))

    def active_containers(self) -> List[str]:
        with self._lock:
            return list(self._active)

    def reset(self) -> None:
        with self._lock:
            if self._active:
                LOGGER.warning(
                    "instances.reset.active_discarded",
                    containers=sorted(self._active),
                )
            self._active.clear()
            self._generations.clear()
            self._history.clear()
            self._seq = 0

    def _record(
        self,
        event: LifecycleEventType,
        container_id: str,
        unit_id: Optional[str],
        generation: int,
    ) -> None:
        self._seq += 1
        self._history.setdefault(container_id, []).append(
            LifecycleEvent(
                seq=self._seq,
                event=event,
                container_id=container_id,
                unit_id=unit_id,
                generation=generation,
            )
        )
