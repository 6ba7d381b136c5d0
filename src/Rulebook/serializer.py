"""JSON export and import of the validated rulebook model.

The export envelope is a flat JSON object ``{"index": ..., "aspects": [...]}``
holding the documents in their YAML key spelling.  Source texts, filenames,
and node graphs are not exported; imported artifacts therefore carry no
source positions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JSONSchemaValidationError

from .errors import ImportFormatError, SchemaValidationError
from .repository import Artifact, Repository
from .schema import AspectDocument, DocumentKind, IndexDocument, SchemaResult, validate_document

__all__ = ["ENVELOPE_JSON_SCHEMA", "RulebookSerializer"]

LOGGER = logging.getLogger(__name__)

ENVELOPE_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Rulebook export envelope",
    "type": "object",
    "required": ["index", "aspects"],
    "properties": {
        "index": {"type": "object"},
        "aspects": {"type": "array", "items": {"type": "object"}},
    },
}

Draft202012Validator.check_schema(ENVELOPE_JSON_SCHEMA)
_ENVELOPE_VALIDATOR = Draft202012Validator(ENVELOPE_JSON_SCHEMA)


def _summary(result: SchemaResult) -> str:
    return "; ".join(issue.describe() for issue in result.issues)


class RulebookSerializer:
    """Round-trip a :class:`Repository` through the JSON export envelope."""

    def __init__(self, repository: Repository, *, logger: Optional[logging.Logger] = None) -> None:
        self.repository = repository
        self.logger = logger or LOGGER

    def export(self) -> str:
        index = self.repository.get_index()
        aspects = self.repository.get_aspects()
        payload = {
            "index": index.value.to_document() if index is not None else None,
            "aspects": [aspect.value.to_document() for aspect in aspects],
        }
        return json.dumps(payload, ensure_ascii=False)

    def import_(self, text: str) -> None:
        """Replace the repository content with the documents in ``text``.

        The repository is only modified once the whole envelope validated.

        Raises:
            ImportFormatError: If ``text`` is not JSON or the envelope is malformed.
            SchemaValidationError: If the index or an aspect violates its schema.
        """

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ImportFormatError(f"failed to parse JSON: {exc}") from exc

        try:
            _ENVELOPE_VALIDATOR.validate(payload)
        except JSONSchemaValidationError as exc:
            location = " -> ".join(str(part) for part in exc.path)
            message = f"{location}: {exc.message}" if location else exc.message
            raise ImportFormatError(f"invalid import structure: {message}") from exc

        index_result = validate_document(DocumentKind.INDEX, payload["index"])
        if not index_result.ok:
            raise SchemaValidationError(f"failed to import index: {_summary(index_result)}")

        aspects: List[AspectDocument] = []
        for position, raw in enumerate(payload["aspects"]):
            result = validate_document(DocumentKind.ASPECT, raw)
            if not result.ok:
                raise SchemaValidationError(f"failed to import aspect #{position}: {_summary(result)}")
            aspects.append(result.value)

        index: IndexDocument = index_result.value
        self.repository.set_index(Artifact(index))
        self.repository.clear_aspects()
        for aspect in aspects:
            self.repository.add_aspect(Artifact(aspect))
        self.logger.debug("imported index %s with %d aspects", index.id, len(aspects))
