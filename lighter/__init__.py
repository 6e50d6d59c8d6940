# lighter/__init__.py

"""
Lighter

A retained-mode component engine: nodes are built from plain props dicts,
mounted into a host element tree, and then mutated, rebuilt or removed
through live ``Node`` handles.
"""

__version__ = "0.1.0"

# --- Engine and nodes ---
from .core import (
    Engine,
    Node,
    Rebuild,
    configure,
    create,
    default_engine,
    get_by_id,
    reset,
)
from .registry import NodeRegistry, create_new_id
from .config import Config, Settings  # Expose configuration access

# --- Animation ---
from .animation import AnimPhase, AnimState

# --- Host tree and events ---
from .dom import Document, Element, Text, parse_html
from .events import Event, ScrollIntoViewOptions

# --- Timers ---
from .timers import ManualScheduler, QtScheduler, Scheduler

# --- Errors ---
from .errors import (
    DanglingPlaceholderError,
    DuplicateIdentifierError,
    LighterError,
    MixedMarkupChildDeclarationError,
    NotATextNodeError,
    RootAlreadyAttachedError,
)
