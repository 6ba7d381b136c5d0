# === NAVMAP v1 ===
# {
#   "module": "tests.rulebook.test_crossrefs",
#   "purpose": "Cross-reference validation tests.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Cross-reference validation tests.

Every context and aspect reference of a parsed repository must resolve;
failures name the offending field path and point into the aspect source."""

from __future__ import annotations

import pytest

from Rulebook.crossrefs import validate_cross_refs
from Rulebook.errors import CrossReferenceError, RulebookStateError
from Rulebook.repository import Repository
from rulebook_helpers import level, make_aspect, statements

# --- Test Cases ---


def test_valid_repository_passes(build_rulebook):
    """Resolvable references of every kind validate silently."""

    target = make_aspect("TGT", Assessment={"Level-3": level("T3")})
    source = make_aspect(
        "SRC",
        Assessment={
            "Level-1": level(
                "L1",
                Assess=statements(("MUST", "ctx:Control.msg-CTO"), ("MAY", "ctx:Security.Access#read")),
            )
        },
        Relations=[
            {"Scope": "aspect:TGT"},
            {"Support": "ctx:Security.Encryption"},
            {"Demand": "ctx:Control.msg-CTO"},
            {"Context": "ctx:Security.Access"},
            {"Responsible": "ctx:Control.msg-CTO"},
            {"See-Also": "aspect:TGT#T3"},
            {"See-Also": "ctx:Security.Access"},
            {"See-Also": "https://example.com"},
            {"See-Also": "md:free text"},
        ],
    )
    build_rulebook(source, target).validate_cross_refs()


def test_unknown_context_in_statement(build_rulebook):
    aspect = make_aspect(
        "SRC", Assessment={"Level-1": level("L1", Assess=statements(("MUST", "ctx:NoSuchNs.Nope")))}
    )
    with pytest.raises(CrossReferenceError) as excinfo:
        build_rulebook(aspect).validate_cross_refs()
    err = excinfo.value
    assert "Assessment.Level-1.Assess.0.MUST" in err.message
    assert 'context "NoSuchNs.Nope" is not defined in index' in err.message
    assert err.file == "SRC.yaml"
    assert err.source.splitlines()[err.line - 1].endswith("ctx:NoSuchNs.Nope")


def test_context_must_name_an_entry(build_rulebook):
    """A path stopping at a namespace does not resolve."""

    aspect = make_aspect("SRC", Relations=[{"Support": "ctx:Security"}])
    with pytest.raises(CrossReferenceError, match=r"Relations\.0\.Support"):
        build_rulebook(aspect).validate_cross_refs()


def test_unknown_aspect(build_rulebook):
    aspect = make_aspect("SRC", Relations=[{"Scope": "aspect:MISSING"}])
    with pytest.raises(CrossReferenceError) as excinfo:
        build_rulebook(aspect).validate_cross_refs()
    assert 'aspect with id "MISSING" is not defined' in excinfo.value.message


def test_unknown_assessment_level(build_rulebook):
    target = make_aspect("X")
    source = make_aspect("SRC", Relations=[{"See-Also": "aspect:X#Y"}])
    with pytest.raises(CrossReferenceError) as excinfo:
        build_rulebook(source, target).validate_cross_refs()
    message = excinfo.value.message
    assert 'aspect with id "X" has no assessment with id "Y" defined' in message
    assert "Relations.0.See-Also" in message


def test_self_reference_resolves(build_rulebook):
    aspect = make_aspect("SELF", Relations=[{"See-Also": "aspect:SELF#L1"}])
    build_rulebook(aspect).validate_cross_refs()


def test_duplicate_aspect_ids(build_rulebook):
    with pytest.raises(CrossReferenceError) as excinfo:
        build_rulebook(make_aspect("DUP"), make_aspect("DUP")).validate_cross_refs()
    assert "Id must be unique" in excinfo.value.message
    assert excinfo.value.line == 1


def test_missing_index_is_a_state_error():
    with pytest.raises(RulebookStateError, match="index still not available"):
        validate_cross_refs(Repository())


def test_statements_are_checked_before_relations(build_rulebook):
    aspect = make_aspect(
        "SRC",
        Assessment={"Level-1": level("L1", Assess=statements(("WONT", "ctx:Bad.One")))},
        Relations=[{"Demand": "ctx:Bad.Two"}],
    )
    with pytest.raises(CrossReferenceError, match="Bad.One"):
        build_rulebook(aspect).validate_cross_refs()
