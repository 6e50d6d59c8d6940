# lighter/core.py
"""
Lighter core: nodes and the engine that creates, updates and removes them.

A ``Node`` is a live handle to one element of the host tree plus everything
the engine tracks for it (props, listeners, timers, children). The ``Engine``
owns the process-wide pieces: the node registry, the outside-click
dispatcher, the global settings, the host document and the timer scheduler.

Typical use goes through the module-level helpers, which talk to a default
engine::

    from lighter import create

    def counter(props=None):
        props = props or {}
        return create({"tag": "button", **props}, rebuild=counter, rebuild_props=props)

    root = create({"attach": document.body, "settings": {"replace_root": False}})
    button = root.add(counter({"text": "0", "on_click": lambda n, e: n.update_text("1")}))
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .animation import AnimPhase, Animator
from .builder import (
    WRAPPER_PLACEHOLDER_TAG,
    ClassValue,
    apply_styles,
    attr_string,
    build_element,
    placeholder,
    split_classes,
)
from .children import collect_template_children, place_template_children
from .config import Config, Settings
from .dom import Document, Element, first_element, parse_html
from .errors import (
    DuplicateIdentifierError,
    NotATextNodeError,
    RootAlreadyAttachedError,
)
from .listeners import ListenerManager, ListenerRecord, OutsideClickDispatcher
from .registry import NodeRegistry, create_new_id
from .timers import QtScheduler, Scheduler

logger = logging.getLogger(__name__)

Props = Dict[str, Any]

SCROLL_TIMER = "scroll_into_view"

# Caret position past any realistic input length, clamped by the element.
_CARET_END = 10 ** 12


@dataclass
class Rebuild:
    """Factory capability of a wrapper node: ``fn(merged_props)`` returns a fresh node."""
    fn: Callable[[Optional[Props]], "Node"]
    props: Optional[Props] = None


@dataclass
class PendingCall:
    handle: Any = None


class Node:
    """
    A live, mutable handle to one element of the host tree.

    ``str(node)`` is the node's placeholder markup, so nodes can be embedded
    in another node's ``html`` function and resolved after parsing.
    """

    def __init__(self, engine: "Engine", node_id: str, props: Optional[Props] = None):
        self.engine = engine
        self.id = node_id
        self.props: Props = props if props is not None else {}
        self.elem: Optional[Element] = None
        self.parent: Optional["Node"] = None
        self.children: List["Node"] = []
        self.listeners: Dict[str, List[ListenerRecord]] = {}
        self.timers: Dict[str, Any] = {}
        self.is_root = False
        self.is_template_child = False
        self.rebuild: Optional[Rebuild] = None
        self.removed = False

    @property
    def parent_elem(self) -> Optional[Element]:
        return self.elem.parent_element if self.elem is not None else None

    def _set_props(self, **values) -> None:
        self.props = {**self.props, **values}

    # --- Tree operations ---
    def add(self, child: Union["Node", Props, None] = None) -> "Node":
        return self.engine.add_child(self, child)

    def remove(self) -> "Node":
        return self.engine.remove(self)

    def remove_children(self) -> "Node":
        for child in list(self.children):
            self.engine.remove(child)
        return self

    def update(self, new_props: Optional[Props] = None, callback: Optional[Callable[["Node"], Any]] = None) -> "Node":
        return self.engine.update(self, new_props, callback)

    # --- Targeted mutators ---
    def update_class(self, new_class: ClassValue, action: str = "replace") -> "Node":
        """
        Changes the element's classes and mirrors the result into ``props["class"]``.

        :param new_class: A space separated string or a list of class names.
        :param action: ``replace`` (default), ``add``, ``remove`` or ``toggle``.
        """
        classes = split_classes(new_class)
        current = split_classes(self.props.get("class"))
        class_list = self.elem.class_list

        if action == "remove":
            for cls in classes:
                class_list.remove(cls)
            current = [c for c in current if c not in classes]
        elif action == "toggle":
            for cls in classes:
                current = [c for c in current if c != cls]
                if class_list.toggle(cls):
                    current.append(cls)
        elif action == "replace":
            self.elem.remove_attribute("class")
            for cls in classes:
                class_list.add(cls)
            current = classes
        elif action == "add":
            for cls in classes:
                class_list.add(cls)
            current = current + [c for c in classes if c not in current]
        else:
            raise ValueError(f"Unknown class action: {action!r}")

        self._set_props(**{"class": current})
        return self

    def update_attr(self, new_attr: Mapping[str, Any]) -> "Node":
        attrs = dict(self.props.get("attr") or {})
        for name, value in new_attr.items():
            value = attr_string(value)
            self.elem.set_attribute(name, value)
            attrs[name] = value
        self._set_props(attr=attrs)
        return self

    def remove_attr(self, attr_key: Union[str, Sequence[str]]) -> "Node":
        keys = [attr_key] if isinstance(attr_key, str) else list(attr_key)
        attrs = dict(self.props.get("attr") or {})
        for key in keys:
            self.elem.remove_attribute(key)
            attrs.pop(key, None)
        self._set_props(attr=attrs)
        return self

    def update_style(self, new_style: Mapping[str, Any]) -> "Node":
        apply_styles(self.elem, new_style)
        style = dict(self.props.get("style") or {})
        for name, value in new_style.items():
            if value is None:
                style.pop(name, None)
            else:
                style[name] = str(value)
        self._set_props(style=style)
        return self

    def update_text(self, new_text: str) -> "Node":
        if not isinstance(self.props.get("text"), str):
            raise NotATextNodeError(self.id)
        self.elem.text_content = new_text
        self._set_props(text=new_text)
        return self

    def update_anim(self, anim_chain: Optional[Sequence[Union[AnimPhase, Mapping[str, Any]]]]) -> "Node":
        self._set_props(anim=list(anim_chain) if anim_chain else None)
        self.engine.animator.update(self, anim_chain)
        return self

    # --- Focus and scrolling ---
    def _in_dom(self, operation: str) -> bool:
        if self.engine.settings.check_in_dom and not self.elem.is_connected:
            logger.warning("Skipping %s on node %s: element is not in the document", operation, self.id)
            return False
        return True

    def focus(self, focus_to_props: Optional[bool] = None) -> "Node":
        """Focuses the element; inputs get the caret at the end of their value."""
        if self._in_dom("focus"):
            self.elem.focus()
            if self.elem.tag_name in ("input", "textarea"):
                self.elem.set_selection_range(_CARET_END, _CARET_END)
        if focus_to_props is not None:
            self._set_props(focus=focus_to_props)
        return self

    def blur(self, focus_to_props: Optional[bool] = None) -> "Node":
        if self._in_dom("blur"):
            self.elem.blur()
        if focus_to_props is not None:
            self._set_props(focus=focus_to_props)
        return self

    def scroll_into_view(self, params: Any = None, timeout: Optional[float] = None) -> "Node":
        """
        Scrolls the element into view, now or after ``timeout`` milliseconds.

        A deferred scroll replaces any deferred scroll still pending for this node.
        """
        if timeout is None:
            if self._in_dom("scroll_into_view"):
                self.elem.scroll_into_view(params)
            return self

        return self.defer(SCROLL_TIMER, timeout, lambda: self.scroll_into_view(params))

    def defer(self, key: str, delay_ms: float, fn: Callable[[], Any]) -> "Node":
        """
        Runs ``fn`` after ``delay_ms`` under the timer ``key``.

        A call still pending under the same key is cancelled; ``remove`` cancels it too.
        """
        self.engine.animator.remove(self, key)
        pending = PendingCall()

        def fire():
            if self.timers.get(key) is pending:
                del self.timers[key]
            fn()

        self.timers[key] = pending
        pending.handle = self.engine.scheduler.call_later(delay_ms, fire)
        return self

    def __str__(self):
        return placeholder(self.id)

    def __repr__(self):
        tag = self.elem.tag_name if self.elem is not None else None
        return f"Node(id={self.id!r}, tag={tag!r}, children={len(self.children)})"


class Engine:
    """
    Creates, updates and removes nodes against one host document.

    :param document: Host tree to build into; a fresh ``Document`` by default.
    :param scheduler: Timer back-end; ``QtScheduler`` by default.
    :param settings: Initial global settings; read from ``Config`` by default.
    """

    _instance: Optional["Engine"] = None

    @classmethod
    def instance(cls) -> "Engine":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def install(cls, engine: Optional["Engine"]) -> Optional["Engine"]:
        """Makes ``engine`` the default engine used by the module-level helpers."""
        cls._instance = engine
        return engine

    def __init__(
        self,
        document: Optional[Document] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[Settings] = None,
        config: Optional[Config] = None,
    ):
        self.document = document if document is not None else Document()
        self.scheduler = scheduler if scheduler is not None else QtScheduler()
        self.settings = settings if settings is not None else Settings.from_config(config)
        self.registry = NodeRegistry()
        self.outside_click = OutsideClickDispatcher(self.document)
        self.listeners = ListenerManager(self.outside_click)
        self.animator = Animator(self.scheduler)
        self.root: Optional[Node] = None

    # --- Lookup ---
    def get_by_id(self, node_id: str) -> Optional[Node]:
        return self.registry.lookup(node_id)

    # --- Create ---
    def create(
        self,
        props: Optional[Props] = None,
        rebuild: Optional[Callable[[Optional[Props]], Node]] = None,
        rebuild_props: Optional[Props] = None,
    ) -> Node:
        """
        Builds a node from ``props``.

        With ``attach`` in props the node becomes the root and is put into the
        host tree. ``rebuild`` makes the node a wrapper: ``update`` will call
        ``rebuild(merged_props)`` to construct it from scratch.
        """
        props = dict(props) if props else {}
        attach: Optional[Element] = props.get("attach")
        if attach is not None and self.root is not None:
            raise RootAlreadyAttachedError(self.root.id)
        node_id = props.get("id")
        if node_id and node_id in self.registry:
            raise DuplicateIdentifierError(node_id)

        node = Node(self, node_id or create_new_id(), props)
        if rebuild is not None:
            node.rebuild = Rebuild(rebuild, rebuild_props)

        node.elem = build_element(node, node.props, self)
        template_children = collect_template_children(node.id, node.elem, self.registry)
        self.listeners.attach(node, node.props)

        if attach is not None:
            self._attach_root(node, attach)

        self.registry.register(node)
        place_template_children(node, template_children, self)
        logger.debug("Created node %s <%s>", node.id, node.elem.tag_name)
        return node

    def _attach_root(self, node: Node, attach: Element) -> None:
        self.settings = self.settings.merged(node.props.get("settings"))
        if self.settings.replace_root:
            attach.replace_with(node.elem)
        else:
            attach.append_child(node.elem)
        self.root = node
        node.parent = None
        node.is_root = True
        self.animator.run(node)

    # --- Children ---
    def add_child(self, parent: Node, child: Union[Node, Props, None] = None) -> Node:
        if child is None:
            child = self.create()
        elif not isinstance(child, Node):
            child = self.create(child)

        if child.parent is not None and child in child.parent.children:
            child.parent.children.remove(child)
        parent.children.append(child)
        parent.elem.append_child(child.elem)
        child.parent = parent
        child.is_template_child = False
        self._after_add(child)
        return child

    def _after_add(self, child: Node) -> None:
        if child.props.get("focus"):
            child.focus()
        self.animator.run(child)
        on_create = child.props.get("on_create")
        if on_create:
            on_create(child)

    # --- Update ---
    def update(
        self,
        node: Node,
        new_props: Optional[Props] = None,
        callback: Optional[Callable[[Node], Any]] = None,
    ) -> Node:
        """
        Re-derives a node from its props merged with ``new_props``.

        Wrapper nodes are rebuilt by their factory and the new node is
        returned (it keeps the old id); other nodes are rebuilt in place.
        """
        if node.rebuild is not None:
            # The factory's create already resolved the new node's placeholders.
            node = self._rebuild(node, new_props)
            template_children = []
        else:
            template_children = self._update_in_place(node, new_props)

        self.listeners.attach(node, node.props)
        if node.props.get("focus"):
            node.focus()
        place_template_children(node, template_children, self)
        self.animator.run(node)
        on_create = node.props.get("on_create")
        if on_create:
            on_create(node)
        if callback:
            callback(node)
        logger.debug("Updated node %s", node.id)
        return node

    def _update_in_place(self, node: Node, new_props: Optional[Props]):
        old_props = node.props
        old_children = node.children
        node.props = {**old_props, **(new_props or {})}
        node.children = []
        try:
            elem = build_element(node, node.props, self)
            discarded = [c for c in old_children if c.is_template_child and c not in node.children]
            template_children = collect_template_children(node.id, elem, self.registry, excluding=discarded)
        except Exception:
            node.props = old_props
            node.children = old_children
            raise
        kept = [c for c in old_children if not c.is_template_child]

        self.listeners.remove_handlers(node)
        node.elem.replace_with(elem)
        node.elem = elem
        for child in discarded:
            self.remove(child)
        # Explicit children move to the new element untouched.
        for child in kept:
            elem.append_child(child.elem)
            node.children.append(child)
            self._after_add(child)
        return template_children

    def _rebuild(self, node: Node, new_props: Optional[Props]) -> Node:
        rebuild = node.rebuild
        stand_in = first_element(parse_html(placeholder(node.id, WRAPPER_PLACEHOLDER_TAG), self.document))
        node.elem.replace_with(stand_in)

        parent = node.parent
        position = parent.children.index(node) if parent is not None and node in parent.children else None
        was_root = node.is_root
        was_template_child = node.is_template_child
        merged = {**(rebuild.props or {}), **(new_props or {})}

        self.remove(node, keep_elem=True)
        new_node = rebuild.fn(merged)
        new_node.rebuild = Rebuild(rebuild.fn, merged)

        if new_node.id != node.id:
            self.outside_click.unregister(new_node)
            self.registry.unregister(new_node.id)
            new_node.id = node.id
            self.registry.register(new_node)

        if new_node.parent is not None and new_node in new_node.parent.children:
            new_node.parent.children.remove(new_node)
        stand_in.replace_with(new_node.elem)
        if parent is not None:
            parent.children.insert(position if position is not None else len(parent.children), new_node)
            new_node.parent = parent
            new_node.is_template_child = was_template_child
        if was_root and self.root is None:
            self.root = new_node
            new_node.is_root = True
        logger.debug("Rebuilt wrapper node %s", new_node.id)
        return new_node

    # --- Remove ---
    def remove(self, node: Node, keep_elem: bool = False) -> Node:
        """
        Destroys ``node`` and its subtree, children first.

        :param keep_elem: Leave the element in the host tree (used while a wrapper is rebuilt).
        """
        if node.removed:
            return node
        node.removed = True
        self.animator.remove_all(node)

        for child in list(node.children):
            self.remove(child)
        node.children = []

        self.listeners.detach_all(node, clear_records=True)
        if not keep_elem:
            node.elem.remove()
        if self.registry.lookup(node.id) is node:
            self.registry.unregister(node.id)
        if node.parent is not None and node in node.parent.children:
            node.parent.children.remove(node)
        if self.root is node:
            self.root = None
            node.is_root = False

        logger.debug("Removed node %s", node.id)
        on_remove = node.props.get("on_remove")
        if on_remove:
            on_remove(node)
        return node


# --- Module-level helpers over the default engine ---
def default_engine() -> Engine:
    return Engine.instance()


def create(
    props: Optional[Props] = None,
    rebuild: Optional[Callable[[Optional[Props]], Node]] = None,
    rebuild_props: Optional[Props] = None,
) -> Node:
    return Engine.instance().create(props, rebuild, rebuild_props)


def get_by_id(node_id: str) -> Optional[Node]:
    return Engine.instance().get_by_id(node_id)


def configure(settings: Optional[Mapping[str, Any]] = None, **overrides) -> Settings:
    """Merges global settings into the default engine; unknown keys are ignored."""
    engine = Engine.instance()
    engine.settings = engine.settings.merged({**(settings or {}), **overrides})
    return engine.settings


def reset(engine: Optional[Engine] = None) -> Engine:
    """Replaces the default engine, with a fresh one unless ``engine`` is given."""
    return Engine.install(engine if engine is not None else Engine())
