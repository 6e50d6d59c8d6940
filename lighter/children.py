# lighter/children.py
"""
Placeholder resolution for template children.

A node's ``html`` function can embed other nodes by formatting them into the
markup (``f"<div>{icon}</div>"``); each embeds as its placeholder
``<cmp id="..."></cmp>``. Once the markup is parsed, the placeholders are
swapped for the live elements of the registered nodes.
"""

from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from .builder import PLACEHOLDER_TAG, placeholder
from .dom import Element
from .errors import DanglingPlaceholderError

if TYPE_CHECKING:
    from .core import Engine, Node
    from .registry import NodeRegistry

TemplateMatch = Tuple[Element, "Node"]

FOCUS_TIMER = "focus"


def collect_template_children(
    parent_id: str,
    elem: Element,
    registry: "NodeRegistry",
    excluding: Optional[Iterable["Node"]] = None,
) -> List[TemplateMatch]:
    """
    Finds the placeholders under ``elem`` and the nodes they stand for.

    Only descendants whose markup is exactly the canonical placeholder count;
    any other ``<cmp>`` element is left alone. Nothing is mutated, so a
    dangling placeholder fails before the tree is touched.
    """
    excluded = {id(n) for n in excluding or ()}
    matches: List[TemplateMatch] = []
    for candidate in elem.query_selector_all(PLACEHOLDER_TAG):
        child_id = candidate.get_attribute("id")
        if not child_id or candidate.outer_html != placeholder(child_id):
            continue
        child = registry.lookup(child_id)
        if child is None or id(child) in excluded:
            raise DanglingPlaceholderError(parent_id, child_id)
        matches.append((candidate, child))
    return matches


def place_template_children(node: "Node", matches: List[TemplateMatch], engine: "Engine") -> None:
    """Swaps each matched placeholder for its node's element and links the node as a child."""
    focus_child = None
    on_create = (node.props or {}).get("on_create")
    for stand_in, child in matches:
        stand_in.replace_with(child.elem)
        child.is_template_child = True
        child.parent = node
        node.children.append(child)
        if (child.props or {}).get("focus"):
            focus_child = child
        engine.animator.run(child)
        if on_create:
            on_create(node)
    if focus_child is not None:
        # Focus waits for the next tick.
        focus_child.defer(FOCUS_TIMER, 0, focus_child.focus)


def resolve_template_children(node: "Node", engine: "Engine") -> List["Node"]:
    matches = collect_template_children(node.id, node.elem, engine.registry)
    place_template_children(node, matches, engine)
    return [child for _, child in matches]
