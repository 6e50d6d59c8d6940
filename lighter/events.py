# lighter/events.py

from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .dom import EventTarget

NONE = 0
CAPTURING_PHASE = 1
AT_TARGET = 2
BUBBLING_PHASE = 3

PRIMARY_BUTTON = 0


@dataclass
class Event:
    """
    A native event travelling through the host element tree.

    :param type: Event name, e.g. ``"click"`` or ``"input"``.
    :param button: Mouse button for pointer events (0 is the primary button).
    :param detail: Free-form payload for custom events.
    """
    type: str
    button: int = PRIMARY_BUTTON
    detail: Any = None
    target: Optional["EventTarget"] = field(default=None, repr=False)
    current_target: Optional["EventTarget"] = field(default=None, repr=False)
    phase: int = NONE
    propagation_stopped: bool = False

    def stop_propagation(self):
        """Stops the event after the current target's listeners have run."""
        self.propagation_stopped = True


@dataclass
class ScrollIntoViewOptions:
    """Options recorded by ``Element.scroll_into_view``."""
    behavior: str = "auto"
    block: str = "start"
    inline: str = "nearest"
