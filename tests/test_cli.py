# tests/test_cli.py
import os
import sys
import tempfile
import textwrap
import unittest

from typer.testing import CliRunner

from lighter import __version__
from lighter.cli import app
from lighter.core import Engine

SAMPLE = textwrap.dedent('''
    from lighter import create

    def main(props=None):
        return create({
            "tag": "p",
            "text": "hello",
            "anim": [{"duration": 10, "class": "a"}, {"duration": 10, "class": "b"}],
        })

    not_callable = 42
''')


class TestCli(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.tmp = tempfile.TemporaryDirectory()
        with open(os.path.join(cls.tmp.name, "lighter_cli_sample.py"), "w", encoding="utf-8") as fh:
            fh.write(SAMPLE)
        sys.path.insert(0, cls.tmp.name)

    @classmethod
    def tearDownClass(cls):
        sys.path.remove(cls.tmp.name)
        sys.modules.pop("lighter_cli_sample", None)
        cls.tmp.cleanup()

    def setUp(self):
        self.runner = CliRunner()

    def tearDown(self):
        Engine.install(None)

    def test_render_replaces_mount_point(self):
        result = self.runner.invoke(app, ["render", "lighter_cli_sample:main"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), '<div><p class="a">hello</p></div>')

    def test_render_advances_virtual_time(self):
        result = self.runner.invoke(app, ["render", "lighter_cli_sample:main", "--advance", "10"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('<p class="b">hello</p>', result.output)

    def test_render_append(self):
        result = self.runner.invoke(app, ["render", "lighter_cli_sample:main", "--append"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(result.output.startswith('<div id="app"></div><div>'))

    def test_render_bad_target(self):
        for target in ("no_colon", "lighter_cli_sample:not_callable", "missing_module_xyz:main"):
            result = self.runner.invoke(app, ["render", target])
            self.assertEqual(result.exit_code, 1)
            self.assertIn("Error", result.output)

    def test_version(self):
        result = self.runner.invoke(app, ["version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)


if __name__ == "__main__":
    unittest.main()
