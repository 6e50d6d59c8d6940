# lighter/listeners.py
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

from .dom import Document, Element
from .events import PRIMARY_BUTTON, Event

if TYPE_CHECKING:
    from .core import Node

logger = logging.getLogger(__name__)

NodeListener = Callable[["Node", Event], Any]

# props key -> native event type
EVENT_PROPS = (
    ("on_click", "click"),
    ("on_hover", "mousemove"),
    ("on_focus", "focus"),
    ("on_blur", "blur"),
    ("on_input", "input"),
    ("on_change", "change"),
)


@dataclass
class ListenerRecord:
    """A handler currently attached to a node's element."""
    type: str
    fn: Callable[[Event], None]
    capture: bool = True
    options: Dict[str, Any] = field(default_factory=dict)
    target: Optional[Element] = None


@dataclass
class _OutsideClickEntry:
    fn: Callable[[Event], None]
    elem: Element


class OutsideClickDispatcher:
    """
    Fans one document-level click listener out to per-node callbacks.

    A node's callback runs for every primary-button click whose target is
    not inside the node's element. The shared listener is installed when the
    first node registers and removed when the last one unregisters.
    """

    def __init__(self, document: Document):
        self.document = document
        self._entries: Dict[str, _OutsideClickEntry] = {}
        self.count = 0

    @property
    def active(self) -> bool:
        return self.count > 0

    def is_registered(self, node_id: str) -> bool:
        return node_id in self._entries

    def register(self, node: "Node", callback: NodeListener) -> None:
        entry = _OutsideClickEntry(fn=lambda e: callback(node, e), elem=node.elem)
        if node.id in self._entries:
            # Re-registration refreshes the element and callback; the count stays.
            self._entries[node.id] = entry
            return
        if self.count == 0:
            self.document.add_event_listener("click", self.dispatch, capture=True)
            logger.debug("Outside-click listener installed")
        self._entries[node.id] = entry
        self.count += 1

    def unregister(self, node: "Node") -> None:
        if node.id not in self._entries:
            return
        del self._entries[node.id]
        self.count -= 1
        if self.count == 0:
            self.document.remove_event_listener("click", self.dispatch, capture=True)
            logger.debug("Outside-click listener removed")

    def dispatch(self, event: Event) -> None:
        if event.button != PRIMARY_BUTTON or event.target is None:
            return
        path = list(event.target.ancestors())
        for node_id, entry in list(self._entries.items()):
            if self._entries.get(node_id) is not entry:
                continue
            if not any(ancestor is entry.elem for ancestor in path):
                entry.fn(event)


class ListenerManager:
    """Attaches a node's event callbacks to its element and keeps the record map in sync."""

    def __init__(self, outside_click: OutsideClickDispatcher):
        self.outside_click = outside_click

    def attach(self, node: "Node", props: Optional[Mapping[str, Any]]) -> Dict[str, List[ListenerRecord]]:
        props = props or {}
        self.remove_handlers(node)
        records: Dict[str, List[ListenerRecord]] = {}
        node.listeners = records

        for prop_name, event_type in EVENT_PROPS:
            callback = props.get(prop_name)
            if callback:
                self._add(node, records, event_type, callback, {})

        for entry in props.get("listeners") or []:
            callback = entry.get("fn")
            if not callback:
                continue
            self._add(node, records, entry["type"], callback, dict(entry.get("options") or {}))

        on_click_outside = props.get("on_click_outside")
        if on_click_outside:
            self.outside_click.register(node, on_click_outside)
        else:
            self.outside_click.unregister(node)
        return records

    def detach_all(self, node: "Node", clear_records: bool = False) -> None:
        self.remove_handlers(node)
        self.outside_click.unregister(node)
        if clear_records:
            node.listeners = {}

    def _add(self, node, records, event_type, callback, options):
        capture = bool(options.get("capture", True))
        once = bool(options.get("once", False))

        def fn(event: Event):
            if once:
                self._forget(node, event_type, record)
            callback(node, event)

        record = ListenerRecord(type=event_type, fn=fn, capture=capture, options=options, target=node.elem)
        node.elem.add_event_listener(event_type, fn, capture=capture, once=once)
        records.setdefault(event_type, []).append(record)

    @staticmethod
    def _forget(node, event_type, record):
        records = node.listeners.get(event_type, [])
        if record in records:
            records.remove(record)
        if not records:
            node.listeners.pop(event_type, None)

    @staticmethod
    def remove_handlers(node: "Node") -> None:
        """Takes every recorded handler off the element it was attached to."""
        for event_type, records in node.listeners.items():
            for record in records:
                record.target.remove_event_listener(event_type, record.fn, capture=record.capture)
