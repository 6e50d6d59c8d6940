import importlib
import logging
import sys
from pathlib import Path

import typer

from . import __version__
from .config import get_config
from .core import Engine, reset
from .dom import Document
from .timers import ManualScheduler

# Create the main Typer application object
app = typer.Typer(
    name="lighter",
    help="Command line tools for the Lighter component engine.",
    add_completion=False,
)


def _load_factory(target: str):
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        print(f"❌ Error: expected MODULE:FACTORY, got '{target}'")
        raise typer.Exit(code=1)

    # Modules next to the caller should be importable without installing them.
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        print(f"❌ Error: could not import '{module_name}': {e}")
        raise typer.Exit(code=1)

    factory = getattr(module, attr, None)
    if not callable(factory):
        print(f"❌ Error: '{attr}' in module '{module_name}' is not callable")
        raise typer.Exit(code=1)
    return factory


@app.command()
def render(
    target: str = typer.Argument(..., help="Factory to render, as MODULE:FACTORY."),
    append: bool = typer.Option(False, "--append", help="Append the root to <body> instead of replacing a mount point."),
    advance: float = typer.Option(0, "--advance", help="Milliseconds of virtual time to run before printing."),
):
    """
    Renders a node factory headlessly and prints the resulting <body> markup.
    """
    logging.basicConfig(level=str(get_config().get("log_level")).upper())

    document = Document()
    mount = document.create_element("div")
    mount.set_attribute("id", "app")
    document.body.append_child(mount)

    scheduler = ManualScheduler()
    engine = reset(Engine(document=document, scheduler=scheduler))
    factory = _load_factory(target)

    root = engine.create({
        "attach": document.body if append else mount,
        "settings": {"replace_root": not append},
    })
    root.add(factory())

    if advance:
        scheduler.advance(advance)
    else:
        scheduler.run_pending()

    print(document.body.inner_html)


@app.command()
def version():
    """Prints the installed Lighter version."""
    print(f"lighter {__version__}")


if __name__ == "__main__":
    app()
