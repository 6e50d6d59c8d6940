# lighter/errors.py


class LighterError(Exception):
    """Base class for every error raised by the engine."""


class DuplicateIdentifierError(LighterError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Id is already in use: {node_id}")


class RootAlreadyAttachedError(LighterError):
    def __init__(self, root_id: str):
        self.root_id = root_id
        super().__init__(f"Root node already attached (current root: {root_id})")


class DanglingPlaceholderError(LighterError):
    """A placeholder in a node's markup names a node that was never created."""

    def __init__(self, parent_id: str, child_id: str):
        self.parent_id = parent_id
        self.child_id = child_id
        super().__init__(
            f"Placeholder node not found in registry (parent node: {parent_id}, "
            f"placeholder id: {child_id})"
        )


class NotATextNodeError(LighterError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(
            f"Cannot update text of node {node_id}: it was not created with text content. "
            "Use node.update({'text': ...}) to turn it into a text node."
        )


class MixedMarkupChildDeclarationError(LighterError):
    def __init__(self, markup: str):
        self.markup = markup
        super().__init__(
            "The 'html' prop must be a function when it embeds child nodes (it is a string now). "
            "For example:\n\n"
            "    html = lambda node: f'<div>Icon {icon()}</div>'\n"
            "    create({'html': html})\n"
        )
