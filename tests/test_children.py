# tests/test_children.py
import unittest

from lighter.children import FOCUS_TIMER, collect_template_children, resolve_template_children
from lighter.config import Settings
from lighter.core import Engine
from lighter.dom import Document
from lighter.errors import DanglingPlaceholderError
from lighter.timers import ManualScheduler


def make_engine():
    return Engine(document=Document(), scheduler=ManualScheduler(), settings=Settings())


class TestTemplateChildren(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()

    def test_placeholder_resolves_to_live_element(self):
        icon = self.engine.create({"tag": "i", "class": "icon"})
        card = self.engine.create({"html": lambda node: f"<div><span>Label</span>{icon}</div>"})

        self.assertIs(card.elem.children[1], icon.elem)
        self.assertEqual(card.elem.query_selector_all("cmp"), [])
        self.assertEqual(card.children, [icon])
        self.assertIs(icon.parent, card)
        self.assertTrue(icon.is_template_child)

    def test_dangling_placeholder(self):
        with self.assertRaises(DanglingPlaceholderError) as ctx:
            self.engine.create({"html": lambda node: '<div><cmp id="missing"></cmp></div>'})
        self.assertEqual(ctx.exception.child_id, "missing")

    def test_dangling_placeholder_registers_nothing(self):
        before = len(self.engine.registry)
        with self.assertRaises(DanglingPlaceholderError):
            self.engine.create({"id": "parent", "html": lambda node: '<div><cmp id="missing"></cmp></div>'})
        self.assertEqual(len(self.engine.registry), before)
        self.assertIsNone(self.engine.get_by_id("parent"))

    def test_non_canonical_cmp_is_left_alone(self):
        child = self.engine.create()
        node = self.engine.create({"html": lambda n: f'<div><cmp id="{child.id}" class="x"></cmp></div>'})
        self.assertEqual(len(node.elem.query_selector_all("cmp")), 1)
        self.assertEqual(node.children, [])

    def test_markup_root_placeholder_uses_child_element(self):
        inner = self.engine.create({"tag": "button", "text": "ok"})
        outer = self.engine.create({"html": lambda n: str(inner)})
        self.assertIs(outer.elem, inner.elem)
        self.assertEqual(outer.props["tag"], "button")
        self.assertEqual(outer.children, [inner])

    def test_on_create_runs_per_template_child(self):
        created = []
        a, b = self.engine.create(), self.engine.create()
        self.engine.create({
            "html": lambda n: f"<div>{a}{b}</div>",
            "on_create": lambda n: created.append(n),
        })
        self.assertEqual(len(created), 2)

    def test_focus_is_deferred(self):
        root = self.engine.create({"attach": self.engine.document.body, "settings": {"replace_root": False}})
        field = self.engine.create({"tag": "input", "focus": True})
        form = root.add({"html": lambda n: f"<form>{field}</form>"})
        self.assertIsNot(self.engine.document.active_element, field.elem)
        self.engine.scheduler.run_pending()
        self.assertIs(self.engine.document.active_element, field.elem)
        self.assertIs(field.parent, form)

    def test_deferred_focus_cancelled_by_remove(self):
        root = self.engine.create({"attach": self.engine.document.body, "settings": {"replace_root": False}})
        field = self.engine.create({"tag": "input", "focus": True})
        form = root.add({"html": lambda n: f"<form>{field}</form>"})
        self.assertIn(FOCUS_TIMER, field.timers)
        form.remove()
        self.assertEqual(field.timers, {})
        self.assertEqual(self.engine.scheduler.pending, 0)
        self.engine.scheduler.run_pending()
        self.assertIsNone(self.engine.document.active_element)

    def test_collect_does_not_mutate(self):
        child = self.engine.create()
        stand_in = self.engine.document.create_fragment(f"<p>{child}</p>").children[0]
        matches = collect_template_children("p1", stand_in, self.engine.registry)
        self.assertEqual([n for _, n in matches], [child])
        self.assertEqual(len(stand_in.query_selector_all("cmp")), 1)
        self.assertIsNone(child.parent)

    def test_resolve_explicit_pass(self):
        child = self.engine.create()
        host = self.engine.create()
        host.elem.append_child(self.engine.document.create_fragment(str(child)))
        resolved = resolve_template_children(host, self.engine)
        self.assertEqual(resolved, [child])
        self.assertIs(host.elem.children[0], child.elem)

    def test_excluded_child_counts_as_dangling(self):
        child = self.engine.create()
        holder = self.engine.document.create_fragment(f"<div>{child}</div>").children[0]
        with self.assertRaises(DanglingPlaceholderError):
            collect_template_children("p1", holder, self.engine.registry, excluding=[child])


if __name__ == "__main__":
    unittest.main()
