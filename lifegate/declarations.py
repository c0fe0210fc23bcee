"""
Container declarations.

Discovery hands us one record per test container: its identity, an
optional explicit lifecycle mode and an optional parent (nesting). The
registry is a flat arena indexed by identity; parents are plain ids,
never object references.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

import yaml


class LifecycleMode(str, Enum):
    """How many container instances back the units of a container."""
    PER_METHOD = "per_method"  # fresh instance per unit
    PER_CLASS = "per_class"    # one instance shared by every unit

    @classmethod
    def parse(cls, value: Union["LifecycleMode", str]) -> "LifecycleMode":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for mode in cls:
            if text.lower() == mode.value or text.upper() == mode.name:
                return mode
        raise ValueError(f"Unknown lifecycle mode '{value}'.")


@dataclass(frozen=True)
class ContainerDeclaration:
    container_id: str
    mode: Optional[LifecycleMode] = None
    parent_id: Optional[str] = None

    @property
    def is_explicit(self) -> bool:
        return self.mode is not None


class ContainerRegistry:
    def __init__(self) -> None:
        self._records: Dict[str, ContainerDeclaration] = {}

    def declare(
        self,
        container_id: str,
        mode: Optional[Union[LifecycleMode, str]] = None,
        parent_id: Optional[str] = None,
    ) -> ContainerDeclaration:
        if container_id in self._records:
            raise ValueError(f"Container '{container_id}' already declared.")
        record = ContainerDeclaration(
            container_id=container_id,
            mode=LifecycleMode.parse(mode) if mode is not None else None,
            parent_id=parent_id,
        )
        self._records[container_id] = record
        return record

    def get(self, container_id: str) -> ContainerDeclaration:
        try:
            return self._records[container_id]
        except KeyError:
            raise KeyError(f"Unknown container_id '{container_id}'.") from None

    def parent_of(self, container_id: str) -> Optional[str]:
        return self.get(container_id).parent_id

    def children_of(self, container_id: str) -> List[str]:
        return [cid for cid, rec in self._records.items() if rec.parent_id == container_id]

    def __contains__(self, container_id: object) -> bool:
        return container_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))


def load_declarations(path: Union[str, Path]) -> ContainerRegistry:
    data = yaml.safe_load(Path(path).read_text()) or {}
    # either {containers: [...]} or a bare list of container entries
    if isinstance(data, list):
        items = data
    else:
        items = list(data.get("containers") or [])
    registry = ContainerRegistry()
    for item in items:
        registry.declare(
            container_id=item["id"],
            mode=item.get("lifecycle"),
            parent_id=item.get("parent"),
        )
    return registry
