# lighter/builder.py
"""
Element builder: turns a node's props into a host element.

Resolution order:
  1. content source: ``html`` function or string, else a bare ``tag`` element
  2. a markup root that is itself a placeholder becomes that node's live element
  3. literal ``text`` (overwrites markup content)
  4. attributes (and ``id`` when ``id_attr`` is set)
  5. classes
  6. inline styles (``None`` removes the property)
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

from .dom import Element, first_element, parse_html
from .errors import MixedMarkupChildDeclarationError

if TYPE_CHECKING:
    from .core import Engine, Node

logger = logging.getLogger(__name__)

PLACEHOLDER_TAG = "cmp"
WRAPPER_PLACEHOLDER_TAG = "cmpw"

ClassValue = Union[str, List[str], None]


def placeholder(node_id: str, tag: str = PLACEHOLDER_TAG) -> str:
    """Canonical empty-tag markup standing in for a node inside another node's html."""
    return f'<{tag} id="{node_id}"></{tag}>'


def split_classes(value: ClassValue) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [c.strip() for c in value if c and c.strip()]


def attr_string(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def apply_styles(elem: Element, style: Mapping[str, Any]) -> None:
    for name, value in style.items():
        if not name:
            continue
        if value is None:
            elem.style.remove_property(name)
        else:
            elem.style.set_property(name, str(value))


def render_markup(node: "Node", props: Mapping[str, Any], engine: "Engine") -> str:
    """Resolves the ``html`` prop to a string, sanitizing it when configured."""
    source = props["html"]
    if isinstance(source, str):
        if f"</{PLACEHOLDER_TAG}>" in source:
            raise MixedMarkupChildDeclarationError(source)
        raw = source
    else:
        raw = source(node)
    settings = engine.settings
    if settings.sanitizer and (props.get("sanitize") or settings.sanitize_all):
        raw = settings.sanitizer(raw)
    return raw


def build_element(node: "Node", props: Optional[Dict[str, Any]], engine: "Engine") -> Element:
    props = props or {}
    document = engine.document

    if props.get("html"):
        fragment = parse_html(render_markup(node, props, engine), document)
        elem = first_element(fragment)
        if elem is None:
            logger.warning("Markup of node %s has no element; using an empty <%s>", node.id, engine.settings.default_tag)
            elem = document.create_element(engine.settings.default_tag)
        elif elem.tag_name == PLACEHOLDER_TAG:
            stand_in = engine.registry.lookup(elem.get_attribute("id"))
            if stand_in is not None:
                elem = stand_in.elem
                stand_in.parent = node
                stand_in.is_template_child = True
                node.children.append(stand_in)
        if elem.parent_node is fragment:
            elem.remove()
        node.props = {**(node.props or {}), "tag": elem.tag_name}
    else:
        elem = document.create_element(props.get("tag") or engine.settings.default_tag)

    if props.get("text"):
        elem.text_content = props["text"]

    for name, value in (props.get("attr") or {}).items():
        elem.set_attribute(name, attr_string(value))
    if props.get("id_attr"):
        elem.set_attribute("id", node.id)

    for cls in split_classes(props.get("class")):
        elem.class_list.add(cls)

    if props.get("style"):
        apply_styles(elem, props["style"])

    return elem
