"""
salecountdown/dispatcher.py

Edge-triggered countdown callbacks.

The dispatcher remembers the most severe state seen so far for one
subscription. Each observed snapshot reports every transition crossed
since then, in severity order, so a coarse poll that jumps straight from
NOT_STARTED to EXPIRED still yields START, URGENT, CRITICAL and EXPIRE.
Each kind is reported at most once.
"""

import logging
from enum import Enum
from typing import List, Optional, Set

from .models import CountdownState


class CallbackKind(Enum):
    """Edge callbacks, in firing order."""
    START = "start"
    URGENT = "urgent"
    CRITICAL = "critical"
    EXPIRE = "expire"

    @property
    def state(self) -> CountdownState:
        """State whose entry fires this callback."""
        return _KIND_STATES[self]

    @property
    def handler_name(self) -> str:
        """Attribute name on CountdownCallbacks, e.g. "on_urgent"."""
        return f"on_{self.value}"


_KIND_STATES = {
    CallbackKind.START: CountdownState.RUNNING,
    CallbackKind.URGENT: CountdownState.URGENT,
    CallbackKind.CRITICAL: CountdownState.CRITICAL,
    CallbackKind.EXPIRE: CountdownState.EXPIRED,
}


class CallbackDispatcher:
    """
    Tracks which edge callbacks have fired for one subscription.

    The first observation only sets the baseline and reports nothing. START
    is only reported after a NOT_STARTED snapshot has been seen, so
    subscribing to a sale that is already running never produces a
    retroactive START. Tiers beyond RUNNING that the first snapshot is
    already in are reported by the second observation.
    """

    def __init__(self):
        self._highest: Optional[CountdownState] = None
        self._fired: Set[CallbackKind] = set()
        self.logger = logging.getLogger(f"{__name__}.CallbackDispatcher")

    @property
    def highest_state(self) -> Optional[CountdownState]:
        """Most severe state observed, or None before the first snapshot."""
        return self._highest

    @property
    def fired(self) -> Set[CallbackKind]:
        return set(self._fired)

    @property
    def finished(self) -> bool:
        """True once EXPIRE has been reported."""
        return CallbackKind.EXPIRE in self._fired

    def has_fired(self, kind: CallbackKind) -> bool:
        return kind in self._fired

    def observe(self, state: CountdownState) -> List[CallbackKind]:
        """
        Record a new state and return the callbacks that must fire now.

        Args:
            state: State of the latest snapshot.

        Returns:
            Callbacks to fire, in severity order. Empty if nothing was crossed.
        """
        if self._highest is None:
            # Baseline only: a sale first seen running has no start edge, and
            # tiers already reached are reported by the next observation
            self._highest = min(state, CountdownState.RUNNING)
            return []

        previous = self._highest

        if state <= previous:
            return []

        to_fire = [
            kind for kind in CallbackKind
            if previous < kind.state <= state and kind not in self._fired
        ]
        self._fired.update(to_fire)
        self._highest = state

        if to_fire:
            self.logger.debug(
                f"Crossed {previous.name} -> {state.name}, "
                f"firing: {[k.value for k in to_fire]}"
            )
        return to_fire
