# === NAVMAP v1 ===
# {
#   "module": "Rulebook.parser",
#   "purpose": "Parse YAML rulebook documents into validated artifacts",
#   "sections": [
#     {
#       "id": "yaml-error-message",
#       "name": "_yaml_error_message",
#       "anchor": "function-yaml-error-message",
#       "kind": "function"
#     },
#     {
#       "id": "parse-document",
#       "name": "parse_document",
#       "anchor": "function-parse-document",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Parse YAML rulebook documents into validated artifacts.

Parsing runs in two phases.  The syntactic phase loads the text with PyYAML
and turns any :class:`yaml.YAMLError` into a :class:`SyntacticParseError`
positioned at the parser's problem mark.  The semantic phase validates the
loaded value against the closed schema of the document kind and positions
the first locatable schema issue through the composed node graph.  Only one
error is reported per parse attempt.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

import yaml

from .errors import SchemaValidationError, SyntacticParseError
from .positions import RulebookLoader, compose_tree, resolve_position
from .repository import Artifact, Repository
from .schema import DocumentKind, validate_document

__all__ = ["parse_document"]

LOGGER = logging.getLogger(__name__)

_DETAIL_PATTERN = re.compile(r":\s*\n.*$", re.DOTALL)


def _yaml_error_message(exc: yaml.YAMLError) -> str:
    if isinstance(exc, yaml.MarkedYAMLError) and exc.problem:
        parts = [part for part in (exc.context, exc.problem) if part]
        return ", ".join(parts)
    message = _DETAIL_PATTERN.sub("", str(exc))
    return message.split("\n", 1)[0]


def parse_document(
    kind: Union[DocumentKind, str],
    filename: str,
    source: str,
    *,
    logger: Optional[logging.Logger] = None,
) -> Artifact:
    """Parse and validate one YAML document.

    Args:
        kind: ``"index"`` or ``"aspect"``.
        filename: Name reported in diagnostics.
        source: Full YAML text.
        logger: Optional diagnostic sink; defaults to the module logger.

    Returns:
        Artifact wrapping the validated model together with its filename,
        source text, and composed node graph.

    Raises:
        SyntacticParseError: If ``source`` is not well-formed YAML.
        SchemaValidationError: If the loaded value violates the schema.
    """

    log = logger or LOGGER
    kind = DocumentKind(kind)
    log.debug("parsing %s document %s", kind.value, filename)

    try:
        raw = yaml.load(source, Loader=RulebookLoader)
    except yaml.YAMLError as exc:
        line = column = 1
        mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
        if mark is not None:
            line, column = mark.line + 1, mark.column + 1
        raise SyntacticParseError(
            f"failed to syntactically parse {kind.value} YAML specification: "
            f"{_yaml_error_message(exc)}",
            source=source,
            file=filename,
            line=line,
            column=column,
        ) from exc

    tree = compose_tree(source)
    result = validate_document(kind, raw)
    if not result.ok:
        for issue in result.issues:
            position = resolve_position(source, tree, issue.path)
            if position is not None:
                raise SchemaValidationError(
                    f"failed to semantically parse {kind.value} YAML specification: "
                    f"{issue.describe()}",
                    source=source,
                    file=filename,
                    line=position.line,
                    column=position.column,
                )
        first = result.issues[0].describe() if result.issues else "invalid document"
        raise SchemaValidationError(
            f"failed to semantically parse {kind.value} YAML specification ({filename}): {first}"
        )

    return Repository.create_artifact(result.value, file=filename, source=source, tree=tree)
