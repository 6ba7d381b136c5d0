"""In-memory store for the validated index and aspect documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from yaml.nodes import Node

from .schema import AspectDocument, IndexDocument

__all__ = ["Artifact", "Repository"]

T = TypeVar("T", IndexDocument, AspectDocument)


@dataclass(slots=True)
class Artifact(Generic[T]):
    """Validated document plus the origin data needed for diagnostics.

    Imported documents have no origin, so ``file`` and ``source`` are empty
    and ``tree`` is ``None``.
    """

    value: T
    file: str = ""
    source: str = ""
    tree: Optional[Node] = None


class Repository:
    """Holds the singleton index and the ordered list of aspects.

    Aspects keep insertion order; consumers that need a different order sort
    explicitly.  The repository is not shared between threads.
    """

    def __init__(self) -> None:
        self._index: Optional[Artifact[IndexDocument]] = None
        self._aspects: List[Artifact[AspectDocument]] = []

    @staticmethod
    def create_artifact(
        value: T,
        file: str = "",
        source: str = "",
        tree: Optional[Node] = None,
    ) -> Artifact[T]:
        return Artifact(value=value, file=file, source=source, tree=tree)

    def get_index(self) -> Optional[Artifact[IndexDocument]]:
        return self._index

    def set_index(self, index: Artifact[IndexDocument]) -> None:
        self._index = index

    def get_aspects(self) -> List[Artifact[AspectDocument]]:
        return list(self._aspects)

    def add_aspect(self, aspect: Artifact[AspectDocument]) -> None:
        self._aspects.append(aspect)

    def find_aspect_by_id(self, aspect_id: str) -> Optional[Artifact[AspectDocument]]:
        """Return the first aspect whose ``Id`` equals ``aspect_id``."""

        for aspect in self._aspects:
            if aspect.value.id == aspect_id:
                return aspect
        return None

    def clear_aspects(self) -> None:
        self._aspects = []
