# lighter/dom.py
"""
Host element tree used by the Lighter engine.

A small, DOM-shaped tree of elements and text nodes: attributes, a class list,
inline styles, event listeners with capture and bubble phases, focus handling
and markup parsing/serialization. The engine only talks to the host through
this surface, so a different host (a webview bridge, a headless renderer)
can provide the same methods.
"""

import html
from collections import OrderedDict
from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional, Union

from .events import (
    AT_TARGET,
    BUBBLING_PHASE,
    CAPTURING_PHASE,
    NONE,
    Event,
    ScrollIntoViewOptions,
)

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}

# Events that do not bubble; capture listeners on ancestors still see them.
NON_BUBBLING_EVENTS = {"focus", "blur", "mouseenter", "mouseleave", "scroll"}

Listener = Callable[[Event], None]


def css_property_name(name: str) -> str:
    """Converts a camelCase style key to its kebab-case CSS property name."""
    if name.startswith("--"):
        return name
    return "".join(["-" + c.lower() if c.isupper() else c for c in name]).lstrip("-")


class _Registration:
    __slots__ = ("fn", "capture", "once", "removed")

    def __init__(self, fn: Listener, capture: bool, once: bool):
        self.fn = fn
        self.capture = capture
        self.once = once
        self.removed = False


class EventTarget:
    """Anything that can receive events: elements, text nodes and the document."""

    def __init__(self):
        self._event_listeners: Dict[str, List[_Registration]] = {}

    def add_event_listener(self, type: str, fn: Listener, capture: bool = False, once: bool = False):
        registrations = self._event_listeners.setdefault(type, [])
        for reg in registrations:
            if reg.fn == fn and reg.capture == capture:
                return
        registrations.append(_Registration(fn, capture, once))

    def remove_event_listener(self, type: str, fn: Listener, capture: bool = False):
        registrations = self._event_listeners.get(type, [])
        for reg in list(registrations):
            if reg.fn == fn and reg.capture == capture:
                reg.removed = True
                registrations.remove(reg)
        if not registrations:
            self._event_listeners.pop(type, None)

    def listener_count(self, type: Optional[str] = None) -> int:
        """Number of registered listeners, for one event type or in total."""
        if type is not None:
            return len(self._event_listeners.get(type, []))
        return sum(len(regs) for regs in self._event_listeners.values())

    def _parent_target(self) -> Optional["EventTarget"]:
        return None

    def dispatch_event(self, event: Event) -> Event:
        """
        Dispatches ``event`` with this object as its target.

        Capture listeners run from the outermost ancestor down to the target,
        then the target's own listeners, then bubbling listeners back up to the
        outermost ancestor (unless the event type does not bubble).
        """
        event.target = self
        path = []
        current = self._parent_target()
        while current is not None:
            path.append(current)
            current = current._parent_target()

        for ancestor in reversed(path):
            ancestor._invoke(event, CAPTURING_PHASE)
            if event.propagation_stopped:
                return self._finish(event)

        self._invoke(event, AT_TARGET)
        if event.propagation_stopped or event.type in NON_BUBBLING_EVENTS:
            return self._finish(event)

        for ancestor in path:
            ancestor._invoke(event, BUBBLING_PHASE)
            if event.propagation_stopped:
                break
        return self._finish(event)

    @staticmethod
    def _finish(event: Event) -> Event:
        event.current_target = None
        event.phase = NONE
        return event

    def _invoke(self, event: Event, phase: int):
        registrations = self._event_listeners.get(event.type)
        if not registrations:
            return
        event.current_target = self
        event.phase = phase
        for reg in list(registrations):
            if reg.removed:
                continue
            if phase == CAPTURING_PHASE and not reg.capture:
                continue
            if phase == BUBBLING_PHASE and reg.capture:
                continue
            if reg.once:
                self.remove_event_listener(event.type, reg.fn, reg.capture)
            reg.fn(event)


class HostNode(EventTarget):
    """Common base of everything that lives in the tree."""

    def __init__(self, owner_document: Optional["Document"] = None):
        super().__init__()
        self.parent_node: Optional["ParentNode"] = None
        self.owner_document = owner_document

    def _parent_target(self) -> Optional[EventTarget]:
        return self.parent_node

    @property
    def parent_element(self) -> Optional["Element"]:
        parent = self.parent_node
        return parent if isinstance(parent, Element) else None

    @property
    def is_connected(self) -> bool:
        node = self
        while node.parent_node is not None:
            node = node.parent_node
        return isinstance(node, Document)

    def remove(self):
        """Detaches the node from its parent. No-op for detached nodes."""
        if self.parent_node is not None:
            self.parent_node.remove_child(self)

    def replace_with(self, other: "HostNode"):
        """Puts ``other`` in this node's place. No-op when this node is detached."""
        parent = self.parent_node
        if parent is None or other is self:
            return
        parent.insert_before(other, self)
        parent.remove_child(self)

    def ancestors(self) -> Iterator["HostNode"]:
        """Yields this node and then every ancestor up to the tree root."""
        node: Optional[HostNode] = self
        while node is not None:
            yield node
            node = node.parent_node

    @property
    def text_content(self) -> str:
        raise NotImplementedError

    def serialize(self) -> str:
        raise NotImplementedError


class Text(HostNode):
    def __init__(self, data: str = "", owner_document: Optional["Document"] = None):
        super().__init__(owner_document)
        self.data = data

    @property
    def text_content(self) -> str:
        return self.data

    @text_content.setter
    def text_content(self, value: str):
        self.data = value

    def serialize(self) -> str:
        return html.escape(self.data, quote=False)

    def __repr__(self):
        return f"Text({self.data[:30]!r})"


class ParentNode(HostNode):
    """A node that can hold children: elements, fragments and the document."""

    def __init__(self, owner_document: Optional["Document"] = None):
        super().__init__(owner_document)
        self.child_nodes: List[HostNode] = []

    @property
    def children(self) -> List["Element"]:
        return [n for n in self.child_nodes if isinstance(n, Element)]

    def _check_insertable(self, node: HostNode):
        if not isinstance(node, DocumentFragment) and isinstance(node, ParentNode):
            for ancestor in self.ancestors():
                if ancestor is node:
                    raise ValueError(f"Inserting {node!r} into {self!r} would create a cycle")

    def _adopt(self, node: HostNode) -> List[HostNode]:
        if isinstance(node, DocumentFragment):
            moved = list(node.child_nodes)
            node.child_nodes = []
            for child in moved:
                child.parent_node = None
            return moved
        node.remove()
        return [node]

    def append_child(self, node: HostNode) -> HostNode:
        self._check_insertable(node)
        for child in self._adopt(node):
            child.parent_node = self
            self.child_nodes.append(child)
        return node

    def insert_before(self, node: HostNode, reference: Optional[HostNode]) -> HostNode:
        if reference is None:
            return self.append_child(node)
        if reference.parent_node is not self:
            raise ValueError(f"{reference!r} is not a child of {self!r}")
        self._check_insertable(node)
        for child in self._adopt(node):
            child.parent_node = self
            self.child_nodes.insert(self.child_nodes.index(reference), child)
        return node

    def remove_child(self, node: HostNode) -> HostNode:
        if node.parent_node is not self:
            raise ValueError(f"{node!r} is not a child of {self!r}")
        self.child_nodes.remove(node)
        node.parent_node = None
        return node

    def contains(self, other: Optional[HostNode]) -> bool:
        """True when ``other`` is this node or one of its descendants."""
        if other is None:
            return False
        return any(node is self for node in other.ancestors())

    def descendants(self) -> Iterator[HostNode]:
        for child in self.child_nodes:
            yield child
            if isinstance(child, ParentNode):
                yield from child.descendants()

    def query_selector_all(self, tag_name: str) -> List["Element"]:
        """Descendant elements with the given tag name, in document order."""
        tag_name = tag_name.lower()
        return [n for n in self.descendants() if isinstance(n, Element) and n.tag_name == tag_name]

    def get_element_by_id(self, element_id: str) -> Optional["Element"]:
        for node in self.descendants():
            if isinstance(node, Element) and node.get_attribute("id") == element_id:
                return node
        return None

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.child_nodes)

    @text_content.setter
    def text_content(self, value: str):
        for child in list(self.child_nodes):
            self.remove_child(child)
        if value:
            self.append_child(Text(str(value), self.owner_document))

    @property
    def inner_html(self) -> str:
        return "".join(child.serialize() for child in self.child_nodes)


class ClassList:
    """Live view over an element's ``class`` attribute."""

    def __init__(self, element: "Element"):
        self._element = element

    def _tokens(self) -> List[str]:
        return (self._element.get_attribute("class") or "").split()

    def _write(self, tokens: List[str]):
        self._element._attributes["class"] = " ".join(tokens)

    def add(self, *tokens: str):
        current = self._tokens()
        for token in tokens:
            self._validate(token)
            if token not in current:
                current.append(token)
        self._write(current)

    def remove(self, *tokens: str):
        current = [t for t in self._tokens() if t not in tokens]
        if self._element.has_attribute("class"):
            self._write(current)

    def toggle(self, token: str) -> bool:
        if self.contains(token):
            self.remove(token)
            return False
        self.add(token)
        return True

    def contains(self, token: str) -> bool:
        return token in self._tokens()

    @staticmethod
    def _validate(token: str):
        if not token:
            raise ValueError("Class token must not be empty")
        if any(c.isspace() for c in token):
            raise ValueError(f"Class token {token!r} must not contain whitespace")

    def __iter__(self):
        return iter(self._tokens())

    def __len__(self):
        return len(self._tokens())

    def __contains__(self, token):
        return self.contains(token)

    def __repr__(self):
        return f"ClassList({self._tokens()!r})"


class Style:
    """Live view over an element's inline ``style`` attribute."""

    def __init__(self, element: "Element"):
        self._element = element

    def _rules(self) -> "OrderedDict[str, str]":
        rules: "OrderedDict[str, str]" = OrderedDict()
        for declaration in (self._element.get_attribute("style") or "").split(";"):
            if ":" not in declaration:
                continue
            name, value = declaration.split(":", 1)
            if name.strip():
                rules[name.strip()] = value.strip()
        return rules

    def _write(self, rules: "OrderedDict[str, str]"):
        self._element._attributes["style"] = " ".join(f"{k}: {v};" for k, v in rules.items())

    def set_property(self, name: str, value: str):
        rules = self._rules()
        rules[css_property_name(name)] = str(value)
        self._write(rules)

    def remove_property(self, name: str) -> str:
        rules = self._rules()
        old = rules.pop(css_property_name(name), "")
        if self._element.has_attribute("style"):
            self._write(rules)
        return old

    def get_property(self, name: str) -> str:
        return self._rules().get(css_property_name(name), "")

    def as_dict(self) -> Dict[str, str]:
        return dict(self._rules())

    def __getitem__(self, name: str) -> str:
        return self.get_property(name)

    def __repr__(self):
        return f"Style({dict(self._rules())!r})"


class Element(ParentNode):
    """A single element of the host tree."""

    def __init__(self, tag_name: str, owner_document: Optional["Document"] = None):
        super().__init__(owner_document)
        if not tag_name:
            raise ValueError("Element tag name must not be empty")
        self.tag_name = tag_name.lower()
        self._attributes: "OrderedDict[str, str]" = OrderedDict()
        self.class_list = ClassList(self)
        self.style = Style(self)
        self.scroll_history: List[ScrollIntoViewOptions] = []
        self._value: Optional[str] = None
        self.selection_start: Optional[int] = None
        self.selection_end: Optional[int] = None

    # --- Attributes ---
    def get_attribute(self, name: str) -> Optional[str]:
        return self._attributes.get(name.lower())

    def set_attribute(self, name: str, value) -> None:
        self._attributes[name.lower()] = str(value)

    def remove_attribute(self, name: str) -> None:
        self._attributes.pop(name.lower(), None)

    def has_attribute(self, name: str) -> bool:
        return name.lower() in self._attributes

    @property
    def attributes(self) -> Dict[str, str]:
        return dict(self._attributes)

    @property
    def id(self) -> str:
        return self.get_attribute("id") or ""

    # --- Form values ---
    @property
    def value(self) -> str:
        if self._value is None:
            return self.get_attribute("value") or ""
        return self._value

    @value.setter
    def value(self, new_value: str):
        self._value = str(new_value)

    def set_selection_range(self, start: int, end: int):
        if self.tag_name not in ("input", "textarea"):
            raise TypeError(f"<{self.tag_name}> does not support text selection")
        length = len(self.value)
        self.selection_start = min(start, length)
        self.selection_end = min(end, length)

    # --- Focus, scrolling and convenience events ---
    def focus(self):
        document = self.owner_document
        if document is None or not self.is_connected or document.active_element is self:
            return
        previous = document.active_element
        if previous is not None:
            previous.blur()
        document.active_element = self
        self.dispatch_event(Event("focus"))

    def blur(self):
        document = self.owner_document
        if document is None or document.active_element is not self:
            return
        document.active_element = None
        self.dispatch_event(Event("blur"))

    def scroll_into_view(self, options: Union[bool, ScrollIntoViewOptions, Dict, None] = None):
        if isinstance(options, dict):
            options = ScrollIntoViewOptions(**options)
        elif isinstance(options, bool) or options is None:
            options = ScrollIntoViewOptions(block="start" if options is not False else "end")
        self.scroll_history.append(options)

    def click(self, button: int = 0) -> Event:
        return self.dispatch_event(Event("click", button=button))

    # --- Serialization ---
    def _start_tag(self) -> str:
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"' for name, value in self._attributes.items()
        )
        return f"<{self.tag_name}{attrs}>"

    @property
    def outer_html(self) -> str:
        if self.tag_name in VOID_ELEMENTS:
            return self._start_tag()
        return f"{self._start_tag()}{self.inner_html}</{self.tag_name}>"

    def serialize(self) -> str:
        return self.outer_html

    def __repr__(self):
        element_id = self.get_attribute("id")
        suffix = f"#{element_id}" if element_id else ""
        return f"<Element {self.tag_name}{suffix}>"


class DocumentFragment(ParentNode):
    def serialize(self) -> str:
        return self.inner_html

    def __repr__(self):
        return f"DocumentFragment(children={len(self.child_nodes)})"


class Document(ParentNode):
    """
    The root of a host tree and its window-level event target.

    Every connected element's event path ends at the document, so listeners
    added here see all clicks made anywhere in the tree.
    """

    def __init__(self):
        super().__init__(None)
        self.owner_document = self
        self.active_element: Optional[Element] = None
        self.body = Element("body", self)
        self.append_child(self.body)

    def create_element(self, tag_name: str) -> Element:
        return Element(tag_name, self)

    def create_text_node(self, data: str) -> Text:
        return Text(data, self)

    def create_fragment(self, markup: str) -> DocumentFragment:
        return parse_html(markup, self)

    def serialize(self) -> str:
        return self.inner_html

    def __repr__(self):
        return "Document()"


class _TreeBuilder(HTMLParser):
    def __init__(self, document: Optional[Document]):
        super().__init__(convert_charrefs=True)
        self.document = document
        self.fragment = DocumentFragment(document)
        self.stack: List[ParentNode] = [self.fragment]

    def handle_starttag(self, tag, attrs):
        element = Element(tag, self.document)
        for name, value in attrs:
            if not element.has_attribute(name):
                element.set_attribute(name, "" if value is None else value)
        self.stack[-1].append_child(element)
        if tag not in VOID_ELEMENTS:
            self.stack.append(element)

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.stack.pop()

    def handle_endtag(self, tag):
        for index in range(len(self.stack) - 1, 0, -1):
            node = self.stack[index]
            if isinstance(node, Element) and node.tag_name == tag:
                del self.stack[index:]
                return

    def handle_data(self, data):
        if not data:
            return
        parent = self.stack[-1]
        last = parent.child_nodes[-1] if parent.child_nodes else None
        if isinstance(last, Text):
            last.data += data
        else:
            parent.append_child(Text(data, self.document))


def parse_html(markup: str, document: Optional[Document] = None) -> DocumentFragment:
    """
    Parses ``markup`` into a detached fragment.

    Unknown tags (such as the engine's ``<cmp>`` placeholders) are kept as
    ordinary elements; no HTML5 re-parenting takes place.
    """
    builder = _TreeBuilder(document)
    builder.feed(markup)
    builder.close()
    return builder.fragment


def first_element(fragment: DocumentFragment) -> Optional[Element]:
    """First top-level element of a fragment, ignoring surrounding text."""
    children = fragment.children
    return children[0] if children else None
