# === NAVMAP v1 ===
# {
#   "module": "tests.rulebook.test_schema",
#   "purpose": "Closed document schema regression tests.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Closed document schema regression tests.

Covers the index and aspect models: unknown keys, required fields, the
reference and date field formats, single-tag assess statements, level
ordering, and the generated JSON Schema."""

from __future__ import annotations

import pytest

from Rulebook.schema import (
    LEVEL_KEYS,
    AspectDocument,
    AssessStatement,
    DocumentKind,
    SchemaIssue,
    document_json_schema,
    validate_document,
)
from rulebook_helpers import index_data, level, make_aspect, statements

# --- Test Cases ---


def test_valid_index_document():
    """A complete index validates and resolves two-segment context paths."""

    result = validate_document(DocumentKind.INDEX, index_data())
    assert result.ok
    index = result.value
    assert index.lookup_context("Security.Encryption") == "Encryption policy"
    assert index.lookup_context("Security") is None
    assert index.lookup_context("Security.Encryption.Deeper") is None
    assert index.lookup_context("Nope.Nothing") is None


def test_index_accepts_open_until_and_optional_logo():
    data = index_data()
    data["Validity"]["Until"] = "2030-12-31"
    data["Logo"] = {"Light": "light.svg", "Dark": "dark.svg"}
    result = validate_document("index", data)
    assert result.ok
    assert result.value.logo.dark == "dark.svg"


def test_unknown_key_is_rejected():
    """Closed schemas report unknown keys at their own path."""

    data = make_aspect(Bogus="x")
    result = validate_document(DocumentKind.ASPECT, data)
    assert not result.ok
    assert result.issues[0].path == ("Bogus",)
    assert "(was 'x')" in result.issues[0].message


def test_missing_required_field():
    data = make_aspect()
    del data["Objective"]
    result = validate_document(DocumentKind.ASPECT, data)
    assert [issue.path for issue in result.issues] == [("Objective",)]


def test_all_issues_are_reported():
    data = make_aspect(Editing={"Created": "yesterday", "Modified": "2025-13-01"})
    result = validate_document(DocumentKind.ASPECT, data)
    paths = [issue.path for issue in result.issues]
    assert ("Editing", "Created") in paths
    assert ("Editing", "Modified") in paths
    assert all("must be a date in YYYY-MM-DD format" in issue.message for issue in result.issues)


@pytest.mark.parametrize("until", ["...", "2025-06-30"])
def test_until_accepts_date_or_open_end(until):
    data = make_aspect(Validity={"From": "2025-01-01", "Until": until})
    assert validate_document(DocumentKind.ASPECT, data).ok


def test_until_rejects_other_text():
    data = make_aspect(Validity={"From": "2025-01-01", "Until": "forever"})
    result = validate_document(DocumentKind.ASPECT, data)
    assert result.issues[0].path == ("Validity", "Until")


def test_invalid_context_reference_format():
    data = make_aspect(
        Assessment={"Level-1": level("L1", Assess=statements(("MUST", "Security.Encryption")))}
    )
    result = validate_document(DocumentKind.ASPECT, data)
    issue = result.issues[0]
    assert issue.path == ("Assessment", "Level-1", "Assess", "0", "MUST")
    assert "must be a context reference (e.g. ctx:Foo.Bar.Quux)" in issue.message


def test_invalid_email_format():
    data = index_data()
    data["Author"]["Email"] = "not-an-email"
    result = validate_document(DocumentKind.INDEX, data)
    assert result.issues[0].path == ("Author", "Email")
    assert "must be an email address" in result.issues[0].message


def test_see_also_accepts_every_reference_form():
    relations = [
        {"See-Also": "ctx:Security.Access"},
        {"See-Also": "aspect:OTHER#L1"},
        {"See-Also": "https://example.com"},
        {"See-Also": "md:*markdown*"},
    ]
    assert validate_document(DocumentKind.ASPECT, make_aspect(Relations=relations)).ok


def test_see_also_rejects_unknown_form():
    result = validate_document(DocumentKind.ASPECT, make_aspect(Relations=[{"See-Also": "foo:bar"}]))
    assert result.issues[0].path == ("Relations", "0", "See-Also")


def test_scope_requires_aspect_reference():
    result = validate_document(DocumentKind.ASPECT, make_aspect(Relations=[{"Scope": "ctx:A.B"}]))
    assert result.issues[0].path == ("Relations", "0", "Scope")
    assert "aspect reference" in result.issues[0].message


def test_statement_with_two_tags_is_rejected():
    statement = {"MUST": "ctx:Control.msg-CTO", "MAY": "ctx:Security.Access"}
    data = make_aspect(Assessment={"Level-1": level("L1", Assess=[statement])})
    result = validate_document(DocumentKind.ASPECT, data)
    assert result.issues[0].path == ("Assessment", "Level-1", "Assess", "0")
    assert "at most one of MUST, SHOULD, MAY, WONT" in result.issues[0].message


def test_statement_accessors():
    statement = AssessStatement.model_validate({"SHOULD": "ctx:Security.Access"})
    assert statement.get("SHOULD") == "ctx:Security.Access"
    assert statement.get("MUST") is None
    assert statement.primary() == ("SHOULD", "ctx:Security.Access")
    assert AssessStatement.model_validate({}).primary() is None


def test_levels_are_returned_highest_first():
    """Level order follows the key, not the document order."""

    data = make_aspect(
        Assessment={
            "Level-2": level("L2"),
            "Level-5": level("L5"),
            "Level-0": level("L0"),
        }
    )
    aspect = validate_document(DocumentKind.ASPECT, data).value
    assert isinstance(aspect, AspectDocument)
    assert [key for key, _ in aspect.assessment.levels()] == ["Level-5", "Level-2", "Level-0"]
    assert aspect.assessment.find_level("L2").id == "L2"
    assert aspect.assessment.find_level("L9") is None


def test_unknown_level_key_is_rejected():
    data = make_aspect(Assessment={"Level-10": level("L10")})
    result = validate_document(DocumentKind.ASPECT, data)
    assert result.issues[0].path == ("Assessment", "Level-10")


def test_to_document_uses_document_spelling():
    data = make_aspect(Relations=[{"See-Also": "https://example.com"}])
    aspect = validate_document(DocumentKind.ASPECT, data).value
    assert aspect.to_document() == data


def test_non_mapping_document():
    result = validate_document(DocumentKind.ASPECT, ["not", "a", "mapping"])
    assert not result.ok
    assert result.issues[0].path == ()


def test_issue_description():
    assert SchemaIssue(("Assessment", "Level-1"), "boom").describe() == "Assessment.Level-1: boom"
    assert SchemaIssue((), "boom").describe() == "boom"


def test_json_schema_uses_aliases():
    schema = document_json_schema("aspect")
    assert schema["additionalProperties"] is False
    assert set(schema["required"]) == {"Assessment", "Id", "Name", "Objective"}
    assert list(schema) == sorted(schema)
    assessment = schema["$defs"]["Assessment"]["properties"]
    assert set(assessment) == set(LEVEL_KEYS)


@pytest.mark.parametrize(
    "fields, path",
    [
        (
            {"Assessment": {"Level-1": level("L1", Assess=[{"MUST": None}])}},
            ("Assessment", "Level-1", "Assess", "0", "MUST"),
        ),
        ({"Assessment": {"Level-5": None, "Level-1": level("L1")}}, ("Assessment", "Level-5")),
        ({"Assessment": {"Level-1": level("L1", Why=None)}}, ("Assessment", "Level-1", "Why")),
        ({"Relations": None}, ("Relations",)),
        ({"Editing": None}, ("Editing",)),
    ],
)
def test_optional_key_with_empty_value_is_rejected(fields, path):
    """Optional keys may be left out, but a present key needs a value."""

    result = validate_document(DocumentKind.ASPECT, make_aspect(**fields))
    assert not result.ok
    assert [issue.path for issue in result.issues] == [path]
    assert result.issues[0].message == "must not be empty"


def test_omitted_optional_keys_are_accepted():
    data = make_aspect(Assessment={"Level-1": level("L1", Assess=statements(("MUST", "ctx:Security.Access")))})
    result = validate_document(DocumentKind.ASPECT, data)
    assert result.ok
    assert result.value.relations is None
    assert result.value.assessment.get("Level-5") is None
