"""Rulebook: validate policy rulebooks written in YAML and render them as HTML.

The public surface is the :class:`Rulebook` facade plus the error hierarchy;
the stage modules (:mod:`~Rulebook.parser`, :mod:`~Rulebook.crossrefs`,
:mod:`~Rulebook.generator`, :mod:`~Rulebook.serializer`) can be used on
their own with a :class:`Repository`.
"""

from __future__ import annotations

__version__ = "0.9.0"

from .errors import (
    ConfigError,
    CrossReferenceError,
    GenerationError,
    ImportFormatError,
    RulebookError,
    RulebookParseError,
    RulebookStateError,
    SchemaValidationError,
    SyntacticParseError,
)
from .loader import load_rulebook
from .repository import Artifact, Repository
from .rulebook import Rulebook

__all__ = [
    "__version__",
    "Artifact",
    "ConfigError",
    "CrossReferenceError",
    "GenerationError",
    "ImportFormatError",
    "Repository",
    "Rulebook",
    "RulebookError",
    "RulebookParseError",
    "RulebookStateError",
    "SchemaValidationError",
    "SyntacticParseError",
    "load_rulebook",
]
