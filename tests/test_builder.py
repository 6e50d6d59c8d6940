# tests/test_builder.py
import unittest

from lighter.builder import attr_string, placeholder, split_classes
from lighter.config import Settings
from lighter.core import Engine
from lighter.dom import Document
from lighter.errors import DuplicateIdentifierError, MixedMarkupChildDeclarationError
from lighter.registry import NodeRegistry, create_new_id
from lighter.timers import ManualScheduler


def make_engine(**settings):
    return Engine(document=Document(), scheduler=ManualScheduler(), settings=Settings(**settings))


class TestRegistry(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()

    def test_new_ids_are_unique(self):
        ids = {create_new_id() for _ in range(200)}
        self.assertEqual(len(ids), 200)
        self.assertTrue(all(i.startswith("c-") for i in ids))

    def test_register_lookup_unregister(self):
        registry = NodeRegistry()
        node = self.engine.create({"id": "a"})
        registry.register(node)
        registry.register(node)
        self.assertIs(registry.lookup("a"), node)
        self.assertIn("a", registry)
        registry.unregister("a")
        registry.unregister("a")
        self.assertIsNone(registry.lookup("a"))
        self.assertEqual(len(registry), 0)

    def test_register_rejects_other_node_with_same_id(self):
        registry = NodeRegistry()
        registry.register(self.engine.create({"id": "a"}))
        other = self.engine.create()
        other.id = "a"
        with self.assertRaises(DuplicateIdentifierError):
            registry.register(other)


class TestHelpers(unittest.TestCase):
    def test_placeholder(self):
        self.assertEqual(placeholder("c-1"), '<cmp id="c-1"></cmp>')
        self.assertEqual(placeholder("c-1", "cmpw"), '<cmpw id="c-1"></cmpw>')

    def test_split_classes(self):
        self.assertEqual(split_classes("a  b\tc"), ["a", "b", "c"])
        self.assertEqual(split_classes([" a", "", "b "]), ["a", "b"])
        self.assertEqual(split_classes(None), [])

    def test_attr_string(self):
        self.assertEqual(attr_string(True), "true")
        self.assertEqual(attr_string(False), "false")
        self.assertEqual(attr_string(None), "null")
        self.assertEqual(attr_string(3), "3")


class TestBuildElement(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()

    def test_default_tag(self):
        self.assertEqual(self.engine.create().elem.tag_name, "div")
        self.assertEqual(make_engine(default_tag="section").create().elem.tag_name, "section")

    def test_props_applied(self):
        node = self.engine.create({
            "tag": "button",
            "text": "Go",
            "attr": {"type": "button", "disabled": True},
            "class": "btn primary",
            "style": {"backgroundColor": "red", "color": None},
        })
        elem = node.elem
        self.assertEqual(elem.tag_name, "button")
        self.assertEqual(elem.text_content, "Go")
        self.assertEqual(elem.get_attribute("disabled"), "true")
        self.assertEqual(list(elem.class_list), ["btn", "primary"])
        self.assertEqual(elem.style.as_dict(), {"background-color": "red"})
        self.assertIsNone(elem.get_attribute("id"))

    def test_id_attr(self):
        node = self.engine.create({"id": "save", "id_attr": True})
        self.assertEqual(node.elem.get_attribute("id"), "save")

    def test_html_string(self):
        node = self.engine.create({"html": '<ul class="list"><li>one</li></ul>', "class": "extra"})
        self.assertEqual(node.elem.tag_name, "ul")
        self.assertEqual(node.props["tag"], "ul")
        self.assertEqual(list(node.elem.class_list), ["list", "extra"])
        self.assertIsNone(node.elem.parent_node)

    def test_html_function_receives_node(self):
        seen = []

        def html(node):
            seen.append(node)
            return f'<p data-owner="{node.id}">hi</p>'

        node = self.engine.create({"html": html})
        self.assertEqual(seen, [node])
        self.assertEqual(node.elem.get_attribute("data-owner"), node.id)

    def test_text_overrides_markup(self):
        node = self.engine.create({"html": "<p><b>bold</b></p>", "text": "plain"})
        self.assertEqual(node.elem.inner_html, "plain")

    def test_markup_without_element(self):
        with self.assertLogs("lighter.builder", level="WARNING"):
            node = self.engine.create({"html": "only text"})
        self.assertEqual(node.elem.tag_name, "div")

    def test_string_markup_with_placeholder_rejected(self):
        child = self.engine.create()
        with self.assertRaises(MixedMarkupChildDeclarationError):
            self.engine.create({"html": f"<div>{child}</div>"})

    def test_sanitizer(self):
        strip = lambda markup: markup.replace("<script>bad()</script>", "")
        engine = make_engine(sanitizer=strip)
        raw = "<div><script>bad()</script>ok</div>"
        self.assertEqual(engine.create({"html": raw}).elem.inner_html, "<script>bad()</script>ok")
        self.assertEqual(engine.create({"html": raw, "sanitize": True}).elem.inner_html, "ok")

        engine_all = make_engine(sanitizer=strip, sanitize_all=True)
        self.assertEqual(engine_all.create({"html": raw}).elem.inner_html, "ok")


if __name__ == "__main__":
    unittest.main()
