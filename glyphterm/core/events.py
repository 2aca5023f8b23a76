# glyphterm/core/events.py
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Type, TypeVar

from glyphterm.types import MeshId

E = TypeVar("E")


class EventManager:
    """Per-type FIFO queues. Reading a type drains its queue."""

    def __init__(self):
        self._queues: Dict[Type[Any], List[Any]] = defaultdict(list)

    def emit(self, event: Any) -> None:
        self._queues[type(event)].append(event)

    def get(self, event_type: Type[E]) -> List[E]:
        if event_type in self._queues:
            events = self._queues[event_type]
            self._queues[event_type] = []
            return events
        return []

    def latest(self, event_type: Type[E]) -> E | None:
        """Drain the queue and keep only the most recent event."""
        events = self.get(event_type)
        return events[-1] if events else None


@dataclass(frozen=True, slots=True)
class WindowResized:
    """The drawable area changed size (physical pixels)."""

    width: int
    height: int


@dataclass(frozen=True, slots=True)
class PointerMoved:
    """Pointer position in window pixels, origin top-left, y down."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class MeshReady:
    """The backend finished creating the GPU resources for `mesh_id`."""

    mesh_id: MeshId
