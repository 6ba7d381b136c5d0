"""Cross-reference validation over a populated repository.

Every reference-typed field of every aspect must resolve: context references
against the two-level context map of the index, aspect references against
the ids of the parsed aspects and, when a ``#SubId`` fragment is given,
against the assessment level ids of the referenced aspect.  Validation is
fail-fast; the first unresolved reference raises a
:class:`~Rulebook.errors.CrossReferenceError` positioned at the offending
field.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Union

from .errors import CrossReferenceError, RulebookStateError
from .positions import resolve_position
from .references import is_aspect_ref, is_context_ref, parse_aspect_ref, parse_context_ref
from .repository import Artifact, Repository
from .schema import AspectDocument, IndexDocument

__all__ = ["CrossReferenceValidator", "validate_cross_refs"]

LOGGER = logging.getLogger(__name__)

FieldPath = List[Union[str, int]]

_CONTEXT_RELATIONS = ("Support", "Demand", "Context", "Responsible")


class CrossReferenceValidator:
    """Check all references of a repository against its index and aspects."""

    def __init__(self, repository: Repository, *, logger: Optional[logging.Logger] = None) -> None:
        self.repository = repository
        self.logger = logger or LOGGER

    def validate(self) -> None:
        """Raise on the first duplicate id or unresolved reference.

        Raises:
            RulebookStateError: If no index has been set on the repository.
            CrossReferenceError: If a reference is malformed or does not resolve.
        """

        index = self.repository.get_index()
        if index is None:
            raise RulebookStateError("index still not available")

        aspects = self.repository.get_aspects()
        self._check_unique_ids(aspects)

        for aspect in aspects:
            where = f"aspect with id {aspect.value.id}"
            for key, level in aspect.value.assessment.levels():
                for position, statement in enumerate(level.assess or []):
                    for tag, value in statement.populated():
                        self._check_context(
                            where, index.value, aspect, ["Assessment", key, "Assess", position, tag], value
                        )

        for aspect in aspects:
            where = f"aspect with id {aspect.value.id}"
            for position, relation in enumerate(aspect.value.relations or []):
                path: FieldPath = ["Relations", position]
                if relation.scope is not None:
                    self._check_aspect(where, aspect, path + ["Scope"], relation.scope)
                for relation_type in _CONTEXT_RELATIONS:
                    value = relation.get(relation_type)
                    if value is not None:
                        self._check_context(where, index.value, aspect, path + [relation_type], value)
                see_also = relation.see_also
                if see_also is not None and see_also.startswith("ctx:"):
                    self._check_context(where, index.value, aspect, path + ["See-Also"], see_also)
                elif see_also is not None and see_also.startswith("aspect:"):
                    self._check_aspect(where, aspect, path + ["See-Also"], see_also)

        self.logger.debug("cross references of %d aspects resolved", len(aspects))

    def _fail(self, message: str, artifact: Artifact, path: Sequence[Union[str, int]]) -> CrossReferenceError:
        position = resolve_position(artifact.source, artifact.tree, path)
        return CrossReferenceError(
            message,
            source=artifact.source,
            file=artifact.file,
            line=position.line if position else None,
            column=position.column if position else None,
        )

    def _check_unique_ids(self, aspects: Sequence[Artifact[AspectDocument]]) -> None:
        seen: Dict[str, Artifact[AspectDocument]] = {}
        for aspect in aspects:
            first = seen.setdefault(aspect.value.id, aspect)
            if first is not aspect:
                origin = f" (first defined in {first.file})" if first.file else ""
                raise self._fail(
                    f"aspect with id {aspect.value.id}: Id must be unique{origin}", aspect, ["Id"]
                )

    def _check_context(
        self,
        where: str,
        index: IndexDocument,
        artifact: Artifact[AspectDocument],
        path: FieldPath,
        value: str,
    ) -> None:
        dotted = ".".join(str(part) for part in path)
        ref = parse_context_ref(value) if is_context_ref(value) else None
        if ref is None:
            raise self._fail(f"{where}: {dotted} has invalid context reference format", artifact, path)
        if index.lookup_context(ref.path) is None:
            raise self._fail(
                f"{where}: {dotted} must be a valid reference: "
                f'context "{ref.path}" is not defined in index',
                artifact,
                path,
            )

    def _check_aspect(
        self,
        where: str,
        artifact: Artifact[AspectDocument],
        path: FieldPath,
        value: str,
    ) -> None:
        dotted = ".".join(str(part) for part in path)
        ref = parse_aspect_ref(value) if is_aspect_ref(value) else None
        if ref is None:
            raise self._fail(f"{where}: {dotted} has invalid aspect reference format", artifact, path)
        target = self.repository.find_aspect_by_id(ref.aspect_id)
        if target is None:
            raise self._fail(
                f"{where}: {dotted} must be a valid reference: "
                f'aspect with id "{ref.aspect_id}" is not defined',
                artifact,
                path,
            )
        if ref.sub_id is not None and target.value.assessment.find_level(ref.sub_id) is None:
            raise self._fail(
                f"{where}: {dotted} must be a valid reference: "
                f'aspect with id "{ref.aspect_id}" has no assessment with id "{ref.sub_id}" defined',
                artifact,
                path,
            )


def validate_cross_refs(repository: Repository, *, logger: Optional[logging.Logger] = None) -> None:
    """Validate every reference of ``repository``; see :class:`CrossReferenceValidator`."""

    CrossReferenceValidator(repository, logger=logger).validate()
