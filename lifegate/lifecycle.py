"""
Lifecycle mode resolution.

The effective mode of a container is the nearest explicit declaration on
its ancestor chain (the container itself first). A chain with no explicit
declaration falls back to the resolver's default policy. Resolution looks
only at the ancestor chain, so it is idempotent and independent of the
order in which siblings are resolved; results are cached per container.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import structlog

from .declarations import ContainerRegistry, LifecycleMode
from .errors import IllegalLifecycleTransition

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Effective mode of one container and where it came from."""
    container_id: str
    mode: LifecycleMode
    source_id: Optional[str]  # None when the default policy applied
    chain: Tuple[str, ...]    # container first, outermost ancestor last

    @property
    def inherited(self) -> bool:
        return self.source_id is not None and self.source_id != self.container_id

    @property
    def defaulted(self) -> bool:
        return self.source_id is None

    def to_dict(self) -> dict:
        return {
            "container_id": self.container_id,
            "mode": self.mode.value,
            "source_id": self.source_id,
            "chain": list(self.chain),
        }


class LifecycleResolver:
    def __init__(
        self,
        registry: ContainerRegistry,
        default_mode: LifecycleMode = LifecycleMode.PER_METHOD,
    ) -> None:
        self.registry = registry
        self.default_mode = LifecycleMode.parse(default_mode)
        self._cache: Dict[str, Resolution] = {}
        self._lock = threading.Lock()

    def resolve_mode(self, container_id: str) -> LifecycleMode:
        return self.explain(container_id).mode

    def explain(self, container_id: str) -> Resolution:
        """
        Resolve a container and report which declaration decided it.

        Raises:
            KeyError: container_id was never declared
            IllegalLifecycleTransition: the ancestor chain has a cycle or
                points at an undeclared parent
        """
        with self._lock:
            cached = self._cache.get(container_id)
            if cached is not None:
                return cached
            resolution = self._resolve(container_id)
            self._cache[container_id] = resolution

        LOGGER.debug(
            "lifecycle.mode.resolved",
            container_id=container_id,
            mode=resolution.mode.value,
            source_id=resolution.source_id,
        )
        return resolution

    def _resolve(self, container_id: str) -> Resolution:
        chain = self._ancestor_chain(container_id)
        for cid in chain:
            declaration = self.registry.get(cid)
            if declaration.is_explicit:
                return Resolution(container_id, declaration.mode, cid, tuple(chain))
        return Resolution(container_id, self.default_mode, None, tuple(chain))

    def _ancestor_chain(self, container_id: str) -> List[str]:
        # The whole chain is walked even past an explicit declaration so a
        # malformed graph is reported no matter where the mode comes from.
        self.registry.get(container_id)
        chain: List[str] = []
        seen = set()
        current: Optional[str] = container_id
        while current is not None:
            if current in seen:
                raise IllegalLifecycleTransition(
                    f"Nesting cycle detected while resolving '{container_id}'.",
                    details={"container_id": container_id, "chain": chain + [current]},
                )
            if current not in self.registry:
                raise IllegalLifecycleTransition(
                    f"Container '{chain[-1]}' names undeclared parent '{current}'.",
                    details={"container_id": container_id, "parent_id": current},
                )
            seen.add(current)
            chain.append(current)
            current = self.registry.parent_of(current)
        return chain

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
