"""Facade bundling repository, parser, validator, generator, and serializer."""

from __future__ import annotations

import logging
from typing import List, Optional

from .crossrefs import validate_cross_refs
from .generator import DEFAULT_FORMAT, RulebookGenerator
from .parser import parse_document
from .repository import Artifact, Repository
from .schema import AspectDocument, DocumentKind, IndexDocument
from .serializer import RulebookSerializer

__all__ = ["Rulebook"]

LOGGER = logging.getLogger(__name__)


class Rulebook:
    """One rulebook: an index plus its aspects.

    Typical use parses the index, parses every aspect, validates cross
    references, and renders; the class does not enforce that sequence.

    Examples:
        >>> rulebook = Rulebook()
        >>> rulebook.get_index() is None
        True
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or LOGGER
        self.repository = Repository()
        self.generator = RulebookGenerator(self.repository, logger=self.logger)
        self.serializer = RulebookSerializer(self.repository, logger=self.logger)

    def get_index(self) -> Optional[Artifact[IndexDocument]]:
        return self.repository.get_index()

    def get_aspects(self) -> List[Artifact[AspectDocument]]:
        return self.repository.get_aspects()

    def find_aspect_by_id(self, aspect_id: str) -> Optional[Artifact[AspectDocument]]:
        return self.repository.find_aspect_by_id(aspect_id)

    def parse_index(self, file: str, source: str) -> Artifact[IndexDocument]:
        """Parse the index document and make it the repository index."""

        index = parse_document(DocumentKind.INDEX, file, source, logger=self.logger)
        self.repository.set_index(index)
        return index

    def parse_aspect(self, file: str, source: str) -> Artifact[AspectDocument]:
        """Parse an aspect document and append it to the repository."""

        aspect = parse_document(DocumentKind.ASPECT, file, source, logger=self.logger)
        self.repository.add_aspect(aspect)
        return aspect

    def validate_cross_refs(self) -> None:
        validate_cross_refs(self.repository, logger=self.logger)

    def render(self, format: str = DEFAULT_FORMAT, *, indent: int = 4, level: int = 2) -> str:
        """Render the rulebook as a complete HTML document."""

        return self.generator.render(format, indent=indent, level=level)

    def export_json(self) -> str:
        return self.serializer.export()

    def import_json(self, text: str) -> None:
        self.serializer.import_(text)
