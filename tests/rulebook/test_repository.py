"""In-memory repository behaviour."""

from __future__ import annotations

from Rulebook.repository import Artifact, Repository
from Rulebook.schema import DocumentKind, validate_document
from rulebook_helpers import make_aspect


def _aspect(aspect_id: str, name: str = "") -> Artifact:
    fields = {"Name": name} if name else {}
    value = validate_document(DocumentKind.ASPECT, make_aspect(aspect_id, **fields)).value
    return Repository.create_artifact(value, file=f"{aspect_id}.yaml")


def test_starts_empty():
    repository = Repository()
    assert repository.get_index() is None
    assert repository.get_aspects() == []


def test_aspects_keep_insertion_order():
    repository = Repository()
    for aspect_id in ("B", "A", "C"):
        repository.add_aspect(_aspect(aspect_id))
    assert [aspect.value.id for aspect in repository.get_aspects()] == ["B", "A", "C"]


def test_get_aspects_returns_a_copy():
    repository = Repository()
    repository.add_aspect(_aspect("A"))
    repository.get_aspects().clear()
    assert len(repository.get_aspects()) == 1


def test_find_aspect_by_id_returns_first_match():
    repository = Repository()
    repository.add_aspect(_aspect("A", "first"))
    repository.add_aspect(_aspect("A", "second"))
    assert repository.find_aspect_by_id("A").value.name == "first"
    assert repository.find_aspect_by_id("Z") is None


def test_clear_aspects_keeps_index():
    repository = Repository()
    repository.add_aspect(_aspect("A"))
    repository.clear_aspects()
    assert repository.get_aspects() == []


def test_created_artifact_without_origin():
    artifact = Repository.create_artifact(_aspect("A").value)
    assert (artifact.file, artifact.source, artifact.tree) == ("", "", None)
