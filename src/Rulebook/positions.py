"""Map field paths inside a parsed document back to source positions.

The concrete syntax tree is PyYAML's composed node graph: every node carries
a ``start_mark`` whose ``index`` is the character offset of the node in the
original text.  Schema errors may address paths deeper than the tree
preserves (missing required keys, synthetic defaults), so
:func:`resolve_position` walks the path from its full depth towards the root
and reports the first node it can locate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

__all__ = [
    "RulebookLoader",
    "SourcePosition",
    "compose_tree",
    "find_node",
    "offset_to_position",
    "resolve_position",
]

PathPart = Union[str, int]


class RulebookLoader(yaml.SafeLoader):
    """Safe loader that keeps dates and YAML 1.1 booleans as plain strings.

    Rulebook dates are validated as ``YYYY-MM-DD`` strings and exported to
    JSON verbatim, so the implicit timestamp resolver is dropped.  Only
    ``true``/``false`` resolve to booleans; ``yes``, ``No``, ``off`` and the
    like stay text, as in YAML 1.2.
    """


_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"
_BOOL_PATTERN = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")

RulebookLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_TIMESTAMP_TAG, _BOOL_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
RulebookLoader.add_implicit_resolver(_BOOL_TAG, _BOOL_PATTERN, list("tTfF"))


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """1-based line and column inside a source text."""

    line: int
    column: int


def compose_tree(source: str) -> Optional[Node]:
    """Compose ``source`` into a node graph, ``None`` for an empty document."""

    return yaml.compose(source, Loader=RulebookLoader)


def offset_to_position(source: str, offset: int) -> SourcePosition:
    """Convert a character offset into a 1-based line/column pair.

    Examples:
        >>> offset_to_position("a: 1\\nb: 2\\n", 5)
        SourcePosition(line=2, column=1)
    """

    offset = max(0, min(offset, len(source)))
    preceding = source[:offset]
    line = preceding.count("\n") + 1
    column = offset - (preceding.rfind("\n") + 1) + 1
    return SourcePosition(line=line, column=column)


def _child(node: Node, part: PathPart) -> Optional[Node]:
    if isinstance(node, MappingNode):
        for key, value in node.value:
            if isinstance(key, ScalarNode) and key.value == str(part):
                return value
        return None
    if isinstance(node, SequenceNode):
        try:
            index = int(part)
        except (TypeError, ValueError):
            return None
        if 0 <= index < len(node.value):
            return node.value[index]
    return None


def find_node(tree: Optional[Node], path: Sequence[PathPart]) -> Optional[Node]:
    """Return the node addressed by ``path`` or ``None`` if any step is missing."""

    node = tree
    for part in path:
        if node is None:
            return None
        node = _child(node, part)
    return node


def resolve_position(
    source: str,
    tree: Optional[Node],
    path: Sequence[PathPart],
) -> Optional[SourcePosition]:
    """Resolve ``path`` to the position of its longest locatable prefix.

    Args:
        source: Original document text the tree was composed from.
        tree: Root node of the composed document, if any.
        path: Field path as produced by schema validation.

    Returns:
        Position of the deepest node found along ``path``, or ``None`` when the
        source or tree is unavailable or no prefix carries a position.
    """

    if source == "" or tree is None:
        return None
    for depth in range(len(path), -1, -1):
        node = find_node(tree, path[:depth])
        if node is not None and getattr(node, "start_mark", None) is not None:
            return offset_to_position(source, node.start_mark.index)
    return None
