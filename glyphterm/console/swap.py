# glyphterm/console/swap.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List

from glyphterm.types import MeshId

logger = logging.getLogger(__name__)

# (old_ref, new_ref) -> number of display entities repointed
RepointFn = Callable[[MeshId, MeshId], int]
ReleaseFn = Callable[[MeshId], None]


class SwapState(Enum):
    REQUESTED = auto()  # new mesh submitted, display still shows old
    READY = auto()  # backend reported the new mesh as created
    APPLIED = auto()  # display entities now reference the new mesh
    RETIRED = auto()  # old mesh released


@dataclass(slots=True)
class PendingSwap:
    old_ref: MeshId
    new_ref: MeshId
    state: SwapState = SwapState.REQUESTED
    repointed: int = 0


SwapListener = Callable[[PendingSwap], None]


class MeshSwapCoordinator:
    """
    Replaces displayed meshes only once their replacement exists on the GPU.

    Swaps are keyed by the identity of the new mesh, so ready notifications
    may arrive in any order. A ready notification for a mesh nobody is
    waiting on is ignored.
    """

    def __init__(self, max_pending: int = 16) -> None:
        self._pending: Dict[MeshId, PendingSwap] = {}
        self._listeners: List[SwapListener] = []
        self.max_pending = max_pending

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, new_ref: object) -> bool:
        return new_ref in self._pending

    @property
    def pending(self) -> List[PendingSwap]:
        return list(self._pending.values())

    def add_listener(self, listener: SwapListener) -> None:
        """Call `listener` after every state transition."""
        self._listeners.append(listener)

    def is_replacing(self, old_ref: MeshId) -> bool:
        """True while a swap away from `old_ref` is still outstanding."""
        return any(s.old_ref == old_ref for s in self._pending.values())

    def request(self, old_ref: MeshId, new_ref: MeshId) -> PendingSwap:
        if new_ref in self._pending:
            raise ValueError(f"Mesh '{new_ref}' is already waiting to be swapped in")
        if self.is_replacing(old_ref):
            raise ValueError(
                f"Mesh '{old_ref}' already has a replacement in flight; "
                "wait for it to be applied before requesting another"
            )

        swap = PendingSwap(old_ref=old_ref, new_ref=new_ref)
        self._pending[new_ref] = swap
        self._notify(swap)

        if len(self._pending) > self.max_pending:
            logger.warning(
                "%d mesh swaps are waiting on the backend (limit %d); "
                "oldest is %s -> %s",
                len(self._pending),
                self.max_pending,
                next(iter(self._pending.values())).old_ref,
                next(iter(self._pending)),
            )
        return swap

    def process_ready(
        self,
        ready_refs: Iterable[MeshId],
        repoint: RepointFn,
        release: ReleaseFn,
    ) -> List[PendingSwap]:
        """
        Advance every swap whose new mesh appears in `ready_refs`.

        Each matched swap goes READY -> APPLIED -> RETIRED within this call and
        is then forgotten. Returns the retired swaps.
        """
        completed: List[PendingSwap] = []

        for ref in ready_refs:
            swap = self._pending.get(ref)
            if swap is None or swap.state is not SwapState.REQUESTED:
                continue

            swap.state = SwapState.READY
            self._notify(swap)

            swap.repointed = repoint(swap.old_ref, swap.new_ref)
            swap.state = SwapState.APPLIED
            self._notify(swap)

            completed.append(swap)

        for swap in completed:
            release(swap.old_ref)
            swap.state = SwapState.RETIRED
            self._notify(swap)
            del self._pending[swap.new_ref]
            logger.debug(
                "Retired mesh %s (replaced by %s on %d entities)",
                swap.old_ref,
                swap.new_ref,
                swap.repointed,
            )

        return completed

    def _notify(self, swap: PendingSwap) -> None:
        for listener in self._listeners:
            listener(swap)
