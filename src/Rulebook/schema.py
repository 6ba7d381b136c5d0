# === NAVMAP v1 ===
# {
#   "module": "Rulebook.schema",
#   "purpose": "Closed pydantic schemas for index and aspect documents",
#   "sections": [
#     {"id": "field-types", "name": "Reference Field Types", "anchor": "FLD", "kind": "api"},
#     {"id": "shared", "name": "Shared Blocks", "anchor": "SHR", "kind": "api"},
#     {"id": "index", "name": "Index Document", "anchor": "IDX", "kind": "api"},
#     {"id": "aspect", "name": "Aspect Document", "anchor": "ASP", "kind": "api"},
#     {"id": "validate", "name": "validate_document", "anchor": "VAL", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Closed pydantic schemas for index and aspect documents.

Every model forbids unknown keys and addresses its fields by the document's
own spelling (``Id``, ``See-Also``, ``Level-9`` ...) through aliases, so
pydantic error locations map one-to-one onto paths inside the YAML source.
:func:`validate_document` turns a raw Python value into either a validated
model or the full, ordered list of :class:`SchemaIssue` records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.json_schema import GenerateJsonSchema, JsonSchemaMode
from pydantic_core import PydanticCustomError

from .references import (
    ASPECT_REF_EXPECTED,
    ASPECT_REF_PATTERN,
    CONTEXT_REF_EXPECTED,
    CONTEXT_REF_PATTERN,
    DATE_EXPECTED,
    DATE_PATTERN,
    EMAIL_EXPECTED,
    EMAIL_PATTERN,
    MARKDOWN_REF_EXPECTED,
    URL_REF_EXPECTED,
    URL_REF_PATTERN,
    classify_reference,
)

__all__ = [
    "ASSESS_TAGS",
    "LEVEL_KEYS",
    "RELATION_TYPES",
    "AspectDocument",
    "AssessStatement",
    "Assessment",
    "AssessmentLevel",
    "Author",
    "CanonicalJsonSchema",
    "DocumentKind",
    "Editing",
    "IndexDocument",
    "Logo",
    "Relation",
    "SchemaIssue",
    "SchemaResult",
    "Validity",
    "document_json_schema",
    "validate_document",
]

LEVEL_KEYS: Tuple[str, ...] = tuple(f"Level-{level}" for level in range(9, -1, -1))
ASSESS_TAGS: Tuple[str, ...] = ("MUST", "SHOULD", "MAY", "WONT")
RELATION_TYPES: Tuple[str, ...] = ("Scope", "Context", "Support", "Demand", "Responsible", "See-Also")


class DocumentKind(str, Enum):
    """Kinds of YAML documents a rulebook directory holds."""

    INDEX = "index"
    ASPECT = "aspect"


# --- Reference Field Types ---


def _matching(pattern: re.Pattern[str], expected: str, error_type: str) -> AfterValidator:
    def check(value: str) -> str:
        if pattern.match(value) is None:
            raise PydanticCustomError(error_type, "must be {expected}", {"expected": expected})
        return value

    return AfterValidator(check)


def _check_until(value: str) -> str:
    if value != "..." and DATE_PATTERN.match(value) is None:
        raise PydanticCustomError(
            "date_format", "must be {expected} or \"...\"", {"expected": DATE_EXPECTED}
        )
    return value


def _check_see_also(value: str) -> str:
    if classify_reference(value) is None:
        expected = " or ".join(
            (CONTEXT_REF_EXPECTED, ASPECT_REF_EXPECTED, URL_REF_EXPECTED, MARKDOWN_REF_EXPECTED)
        )
        raise PydanticCustomError("reference_format", "must be {expected}", {"expected": expected})
    return value


ContextRefStr = Annotated[str, _matching(CONTEXT_REF_PATTERN, CONTEXT_REF_EXPECTED, "context_reference")]
AspectRefStr = Annotated[str, _matching(ASPECT_REF_PATTERN, ASPECT_REF_EXPECTED, "aspect_reference")]
UrlStr = Annotated[str, _matching(URL_REF_PATTERN, URL_REF_EXPECTED, "url_reference")]
EmailStr = Annotated[str, _matching(EMAIL_PATTERN, EMAIL_EXPECTED, "email_format")]
DateStr = Annotated[str, _matching(DATE_PATTERN, DATE_EXPECTED, "date_format")]
UntilStr = Annotated[str, AfterValidator(_check_until)]
AnyRefStr = Annotated[str, AfterValidator(_check_see_also)]


class _Closed(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Optional keys may be omitted but never left empty.
        if value is None:
            raise PydanticCustomError("null_value", "must not be empty")
        return value

    def to_document(self) -> Dict[str, Any]:
        """Return the document-shaped mapping (alias keys, unset fields omitted)."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Shared Blocks ---


class Editing(_Closed):
    created: DateStr = Field(alias="Created")
    modified: DateStr = Field(alias="Modified")


class Validity(_Closed):
    valid_from: DateStr = Field(alias="From")
    until: UntilStr = Field(alias="Until")


class Logo(_Closed):
    light: str = Field(alias="Light")
    dark: str = Field(alias="Dark")


class Author(_Closed):
    name: str = Field(alias="Name")
    email: EmailStr = Field(alias="Email")
    web: UrlStr = Field(alias="Web")


# --- Index Document ---


class IndexDocument(_Closed):
    """Rulebook-wide metadata and the namespace of valid context references."""

    editing: Editing = Field(alias="Editing")
    validity: Validity = Field(alias="Validity")
    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    logo: Optional[Logo] = Field(default=None, alias="Logo")
    version: str = Field(alias="Version")
    author: Author = Field(alias="Author")
    description: str = Field(alias="Description")
    context: Dict[str, Dict[str, str]] = Field(alias="Context")

    def lookup_context(self, path: str) -> Optional[str]:
        """Resolve a dotted context path segment by segment.

        Returns the context text when ``path`` names a ``namespace.name``
        entry, ``None`` otherwise (including paths that stop at a namespace
        or continue past an entry).
        """

        node: Any = self.context
        for segment in path.split("."):
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node if isinstance(node, str) else None


# --- Aspect Document ---


class AssessStatement(_Closed):
    """One obligation statement; at most one of the four tags is populated."""

    must: Optional[ContextRefStr] = Field(default=None, alias="MUST")
    should: Optional[ContextRefStr] = Field(default=None, alias="SHOULD")
    may: Optional[ContextRefStr] = Field(default=None, alias="MAY")
    wont: Optional[ContextRefStr] = Field(default=None, alias="WONT")

    @model_validator(mode="after")
    def check_single_tag(self) -> "AssessStatement":
        if len(list(self.populated())) > 1:
            raise PydanticCustomError(
                "statement_exclusive",
                "must populate at most one of {tags}",
                {"tags": ", ".join(ASSESS_TAGS)},
            )
        return self

    def get(self, tag: str) -> Optional[str]:
        return getattr(self, tag.lower())

    def populated(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(tag, reference)`` pairs in MUST, SHOULD, MAY, WONT order."""

        for tag in ASSESS_TAGS:
            value = self.get(tag)
            if value is not None:
                yield tag, value

    def primary(self) -> Optional[Tuple[str, str]]:
        return next(self.populated(), None)


class AssessmentLevel(_Closed):
    id: str = Field(alias="Id")
    what: str = Field(alias="What")
    why: Optional[str] = Field(default=None, alias="Why")
    assess: Optional[List[AssessStatement]] = Field(default=None, alias="Assess")
    sota: Optional[str] = Field(default=None, alias="SotA")
    optimize: Optional[str] = Field(default=None, alias="Optimize")


class Assessment(_Closed):
    """Sparse ladder of the ten fixed assessment levels."""

    level_9: Optional[AssessmentLevel] = Field(default=None, alias="Level-9")
    level_8: Optional[AssessmentLevel] = Field(default=None, alias="Level-8")
    level_7: Optional[AssessmentLevel] = Field(default=None, alias="Level-7")
    level_6: Optional[AssessmentLevel] = Field(default=None, alias="Level-6")
    level_5: Optional[AssessmentLevel] = Field(default=None, alias="Level-5")
    level_4: Optional[AssessmentLevel] = Field(default=None, alias="Level-4")
    level_3: Optional[AssessmentLevel] = Field(default=None, alias="Level-3")
    level_2: Optional[AssessmentLevel] = Field(default=None, alias="Level-2")
    level_1: Optional[AssessmentLevel] = Field(default=None, alias="Level-1")
    level_0: Optional[AssessmentLevel] = Field(default=None, alias="Level-0")

    def get(self, key: str) -> Optional[AssessmentLevel]:
        if key not in LEVEL_KEYS:
            raise KeyError(key)
        return getattr(self, key.replace("-", "_").lower())

    def levels(self) -> List[Tuple[str, AssessmentLevel]]:
        """Return populated levels in descending key order (``Level-9`` first)."""

        populated = []
        for key in sorted(LEVEL_KEYS, reverse=True):
            level = self.get(key)
            if level is not None:
                populated.append((key, level))
        return populated

    def find_level(self, level_id: str) -> Optional[AssessmentLevel]:
        for _, level in self.levels():
            if level.id == level_id:
                return level
        return None


class Relation(_Closed):
    scope: Optional[AspectRefStr] = Field(default=None, alias="Scope")
    support: Optional[ContextRefStr] = Field(default=None, alias="Support")
    demand: Optional[ContextRefStr] = Field(default=None, alias="Demand")
    context: Optional[ContextRefStr] = Field(default=None, alias="Context")
    responsible: Optional[ContextRefStr] = Field(default=None, alias="Responsible")
    see_also: Optional[AnyRefStr] = Field(default=None, alias="See-Also")

    def get(self, relation_type: str) -> Optional[str]:
        if relation_type not in RELATION_TYPES:
            raise KeyError(relation_type)
        return getattr(self, relation_type.replace("-", "_").lower())


class AspectDocument(_Closed):
    """One policy topic with its assessment ladder and relations."""

    editing: Optional[Editing] = Field(default=None, alias="Editing")
    validity: Optional[Validity] = Field(default=None, alias="Validity")
    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    icons: Optional[List[str]] = Field(default=None, alias="Icons")
    objective: str = Field(alias="Objective")
    assessment: Assessment = Field(alias="Assessment")
    relations: Optional[List[Relation]] = Field(default=None, alias="Relations")


Document = Union[IndexDocument, AspectDocument]

_MODELS = {
    DocumentKind.INDEX: IndexDocument,
    DocumentKind.ASPECT: AspectDocument,
}


# --- validate_document ---


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """Single schema violation addressed by its path inside the document."""

    path: Tuple[str, ...]
    message: str

    def describe(self) -> str:
        if not self.path:
            return self.message
        return f"{'.'.join(self.path)}: {self.message}"


@dataclass(frozen=True, slots=True)
class SchemaResult:
    value: Optional[Document] = None
    issues: List[SchemaIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.issues


def _issues_from(exc: PydanticValidationError) -> List[SchemaIssue]:
    issues: List[SchemaIssue] = []
    for error in exc.errors(include_url=False):
        path = tuple(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        if "input" in error and error.get("type") not in {"missing", "model_type", "dict_type"}:
            value = error["input"]
            if isinstance(value, (str, int, float, bool)):
                message = f"{message} (was {value!r})"
        issues.append(SchemaIssue(path=path, message=message))
    return issues


def validate_document(kind: Union[DocumentKind, str], raw: Any) -> SchemaResult:
    """Validate ``raw`` against the closed schema of ``kind``.

    Validation is exhaustive: every violation pydantic detects is reported,
    in document order.

    Args:
        kind: Document kind (``"index"`` or ``"aspect"``).
        raw: Python value produced by the YAML or JSON loader.

    Returns:
        :class:`SchemaResult` holding the validated model, or the issues.
    """

    model = _MODELS[DocumentKind(kind)]
    try:
        value = model.model_validate(raw)
    except PydanticValidationError as exc:
        return SchemaResult(issues=_issues_from(exc))
    return SchemaResult(value=value)


class CanonicalJsonSchema(GenerateJsonSchema):
    """Schema generator with recursively sorted keys for reproducible output."""

    def generate(self, schema: Any, mode: JsonSchemaMode = "validation") -> Dict[str, Any]:
        return self._sort_dict(super().generate(schema, mode))

    @staticmethod
    def _sort_dict(obj: Any) -> Any:
        if isinstance(obj, dict):
            return {key: CanonicalJsonSchema._sort_dict(obj[key]) for key in sorted(obj)}
        if isinstance(obj, list):
            return [CanonicalJsonSchema._sort_dict(item) for item in obj]
        return obj


def document_json_schema(kind: Union[DocumentKind, str]) -> Dict[str, Any]:
    """Return the canonical JSON Schema of a document kind (alias keys)."""

    model = _MODELS[DocumentKind(kind)]
    return model.model_json_schema(by_alias=True, schema_generator=CanonicalJsonSchema)
