# lighter/animation.py
"""
Animation phase chains.

A chain is a finite list of phases. Each tick applies one phase's class and
style mutation and schedules the next tick after the phase's duration. Phases
can redirect the chain: ``goto_index`` (a number, or a function of the node
and the chain's shared state) jumps unconditionally, while the numeric return
value of ``on_phase_start``/``on_phase_end`` overrides the next index. A
numeric return from ``on_phase_end`` re-enters the chain at once, so
zero-duration "gate" phases can branch before anything visible happens.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .builder import ClassValue

if TYPE_CHECKING:
    from .core import Node

logger = logging.getLogger(__name__)

ANIM_TIMER = "anim"

CLASS_ACTIONS = ("add", "remove", "replace", "toggle")


class AnimState:
    """Scratch key/value state shared by the callbacks of one running chain."""

    def __init__(self):
        self.state: Dict[str, Any] = {}

    def set_state(self, key: str, value: Any) -> None:
        self.state[key] = value

    def remove_state(self, key: str) -> None:
        self.state.pop(key, None)

    def get(self, key: str, default: Any = None) -> Any:
        return self.state.get(key, default)

    def __repr__(self):
        return f"AnimState({self.state!r})"


PhaseCallback = Callable[["Node", AnimState], Optional[int]]
GotoIndex = Union[int, Callable[["Node", AnimState], int]]


@dataclass
class AnimPhase:
    """
    One phase of an animation chain.

    :param duration: Milliseconds until the next tick.
    :param goto_index: Next phase index, or a function computing it.
    :param style: Inline styles to apply (``None`` values remove the property).
    :param class_: Classes to apply with ``class_action``.
    :param class_action: One of ``add``, ``remove``, ``replace`` (default) or ``toggle``.
    :param on_phase_start: Called before the mutation; a returned int overrides the next index.
    :param on_phase_end: Called on the following tick; a returned int re-enters at that index.
    """
    duration: float
    goto_index: Optional[GotoIndex] = None
    style: Optional[Dict[str, Any]] = None
    class_: ClassValue = None
    class_action: str = "replace"
    on_phase_start: Optional[PhaseCallback] = None
    on_phase_end: Optional[PhaseCallback] = None

    def __post_init__(self):
        if self.class_action not in CLASS_ACTIONS:
            raise ValueError(f"Unknown class action {self.class_action!r}; expected one of {CLASS_ACTIONS}")

    @classmethod
    def coerce(cls, value: Union["AnimPhase", Mapping[str, Any]]) -> "AnimPhase":
        if isinstance(value, AnimPhase):
            return value
        data = dict(value)
        if "class" in data:
            data["class_"] = data.pop("class")
        if data.get("class_action") is None:
            data.pop("class_action", None)
        return cls(**data)


def _numeric(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


@dataclass
class AnimTimer:
    """Per-node state of the running chain."""
    chain: List[AnimPhase]
    anim_state: AnimState = field(default_factory=AnimState)
    cur_index: int = 0
    prev_index: Optional[int] = None
    handle: Any = None


class Animator:
    """Runs animation chains on nodes using the engine's scheduler."""

    def __init__(self, scheduler):
        self.scheduler = scheduler

    def run(self, node: "Node") -> None:
        """Starts the chain stored in the node's props, if any."""
        chain = (node.props or {}).get("anim")
        if chain:
            self.update(node, chain)

    def update(self, node: "Node", chain: Optional[Sequence[Union[AnimPhase, Mapping[str, Any]]]]) -> None:
        """Replaces the node's running chain. An empty chain leaves the node idle."""
        self.remove(node, ANIM_TIMER)
        if not chain:
            return
        timer = AnimTimer([AnimPhase.coerce(phase) for phase in chain])
        node.timers[ANIM_TIMER] = timer
        self._tick(node, timer)

    def remove(self, node: "Node", key: str) -> None:
        timer = node.timers.pop(key, None)
        if timer is not None:
            self.scheduler.cancel(timer.handle)

    def remove_all(self, node: "Node") -> None:
        for key in list(node.timers):
            self.remove(node, key)

    def _tick(self, node: "Node", timer: AnimTimer) -> None:
        if node.timers.get(ANIM_TIMER) is not timer:
            # A replaced or cleared chain whose callback was already queued.
            return
        timer.handle = None
        chain = timer.chain
        next_index: Optional[int] = None

        if timer.prev_index is not None:
            prev = chain[timer.prev_index]
            timer.prev_index = None
            if prev.on_phase_end:
                next_index = _numeric(prev.on_phase_end(node, timer.anim_state))
                if node.timers.get(ANIM_TIMER) is not timer:
                    return
                if next_index is not None:
                    timer.cur_index = next_index
                    self._tick(node, timer)
                    return

        cur_index = timer.cur_index
        if cur_index < 0 or cur_index >= len(chain):
            logger.debug("Animation of node %s finished at index %s", node.id, cur_index)
            return
        phase = chain[cur_index]

        if phase.on_phase_start:
            started = _numeric(phase.on_phase_start(node, timer.anim_state))
            if started is not None:
                next_index = started
            if node.timers.get(ANIM_TIMER) is not timer:
                return

        if phase.class_:
            node.update_class(phase.class_, phase.class_action)
        if phase.style:
            node.update_style(phase.style)

        timer.prev_index = cur_index
        timer.handle = self.scheduler.call_later(phase.duration, lambda: self._tick(node, timer))

        if phase.goto_index is not None:
            goto = phase.goto_index
            timer.cur_index = goto if isinstance(goto, int) else int(goto(node, timer.anim_state))
            return
        timer.cur_index = next_index if next_index is not None else cur_index + 1
