# glyphterm/core/world.py
from __future__ import annotations

from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Tuple,
    Type,
    TypeVar,
)

from glyphterm.core.events import EventManager
from glyphterm.types import EntityId

T = TypeVar("T")
Ev = TypeVar("Ev")


class World:
    """
    Entities with components, plus global resources and event queues.

    Terminal scenes hold a handful of display entities, so components are
    kept in a plain dict per entity.
    """

    def __init__(self) -> None:
        self._next_id: int = 1
        self._entities: Dict[EntityId, Dict[Type[Any], Any]] = {}
        self._resources: Dict[Type[Any], Any] = {}
        self._event_manager = EventManager()

    # RESOURCE MANAGEMENT
    def add_resource(self, resource: Any) -> None:
        """Register a global resource (e.g. TerminalContext, MeshManager)."""
        self._resources[type(resource)] = resource

    def get_resource(self, resource_type: Type[T]) -> T:
        """Retrieve a resource. Raises KeyError if missing."""
        res = self._resources.get(resource_type)
        if res is None:
            raise KeyError(f"Resource not found: {resource_type.__name__}")
        return res

    def try_resource(self, resource_type: Type[T]) -> T | None:
        """Retrieve a resource or returns None."""
        return self._resources.get(resource_type)

    # EVENT MANAGEMENT
    def emit_event(self, event: Any) -> None:
        """Queues an event signal."""
        self._event_manager.emit(event)

    def get_events(self, event_type: Type[Ev]) -> List[Ev]:
        """Consumes and returns all events of the given type."""
        return self._event_manager.get(event_type)

    def latest_event(self, event_type: Type[Ev]) -> Ev | None:
        """Consumes all events of the given type and returns the newest."""
        return self._event_manager.latest(event_type)

    # ENTITY MANAGEMENT
    def create_entity(self, *components: Any) -> EntityId:
        """Creates an entity, optionally with starting components."""
        eid = EntityId(self._next_id)
        self._next_id += 1

        self._entities[eid] = {type(c): c for c in components}
        return eid

    # COMPONENT MANAGEMENT
    def mutate_component(self, eid: EntityId, component: Any) -> None:
        """
        Update an EXISTING component with a new instance.
        """
        record = self._entities.get(eid)
        if record is None:
            raise KeyError(f"Entity {eid} does not exist.")

        comp_type = type(component)
        if comp_type not in record:
            raise KeyError(
                f"Entity {eid} cannot mutate {comp_type.__name__}: Component missing. "
                "Components are attached when the entity is created."
            )
        record[comp_type] = component

    # QUERIES
    def join(self, *component_types: Type[Any]) -> Iterator[Tuple[Any, ...]]:
        """Yields (eid, *components) for every entity holding all the given types."""
        for eid, record in list(self._entities.items()):
            if all(t in record for t in component_types):
                yield (eid, *(record[t] for t in component_types))
