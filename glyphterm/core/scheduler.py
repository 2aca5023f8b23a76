# glyphterm/core/scheduler.py
from __future__ import annotations

from enum import Enum, auto
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Dict, List, Union

from glyphterm.core.world import World
from glyphterm.types import SystemId


class Stage(Enum):
    STARTUP = auto()  # Run once when the application starts
    INPUT = auto()  # Window resize, pointer
    UPDATE = auto()  # Caller writes cells
    REBUILD = auto()  # Dirty consoles rebuild and submit meshes
    SWAP = auto()  # Ready meshes replace displayed ones
    RENDER = auto()  # Draw display entities


# Stages run every tick, in this order.
TICK_STAGES = (Stage.INPUT, Stage.UPDATE, Stage.REBUILD, Stage.SWAP, Stage.RENDER)

SystemFn = Callable[[World], None]


class Scheduler:
    def __init__(self):
        self._registered_systems = []

        self._execution_order: Dict[Stage, List[SystemFn]] = {
            s: [] for s in Stage
        }
        self._is_compiled = False

    def add_system(
        self,
        stage: Stage,
        system: SystemFn,
        name: Union[SystemId, None] = None,
        before: Union[SystemId, List[SystemId], None] = None,
        after: Union[SystemId, List[SystemId], None] = None,
    ) -> None:
        """Register a plain function as a system."""
        if self._is_compiled:
            raise RuntimeError("Cannot add systems after scheduler is compiled.")

        sys_name = name or SystemId(system.__name__)

        before_deps = [before] if isinstance(before, str) else (before or [])
        after_deps = [after] if isinstance(after, str) else (after or [])

        self._registered_systems.append(
            {
                "stage": stage,
                "func": system,
                "name": sys_name,
                "before": before_deps,
                "after": after_deps,
            }
        )

    def compile(self) -> None:
        by_stage = {s: [] for s in Stage}
        for entry in self._registered_systems:
            by_stage[entry["stage"]].append(entry)

        for stage, entries in by_stage.items():
            sorter = TopologicalSorter()
            name_map = {}

            for entry in entries:
                name = entry["name"]
                name_map[name] = entry["func"]
                sorter.add(name, *entry["after"])

            for entry in entries:
                for successor in entry["before"]:
                    sorter.add(successor, entry["name"])

            try:
                sorted_names = list(sorter.static_order())
            except CycleError as e:
                raise RuntimeError(
                    f"Cycle detected in stage {stage.name}: {e.args[1]}"
                ) from e

            self._execution_order[stage] = [
                name_map[name] for name in sorted_names if name in name_map
            ]

        self._is_compiled = True

    def run_stage(self, stage: Stage, world: World) -> None:
        if not self._is_compiled:
            self.compile()

        for system in self._execution_order[stage]:
            system(world)

    def tick(self, world: World) -> None:
        """Run one processing step: every per-tick stage, in order."""
        for stage in TICK_STAGES:
            self.run_stage(stage, world)
