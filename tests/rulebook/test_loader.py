"""Loading a rulebook from a source directory."""

from __future__ import annotations

import logging
import shutil

import pytest

from Rulebook.errors import ConfigError, CrossReferenceError, SyntacticParseError
from Rulebook.loader import aspect_files, load_rulebook
from Rulebook.settings import get_settings


def test_loads_sample_rulebook(sample_dir):
    rulebook = load_rulebook(sample_dir)
    assert rulebook.get_index().value.id == "SAMPLE"
    assert [aspect.value.id for aspect in rulebook.get_aspects()] == ["ACC", "ENC"]
    assert rulebook.find_aspect_by_id("ENC").file.endswith("ENC.yaml")


def test_aspect_files_exclude_index(sample_dir):
    names = [path.name for path in aspect_files(sample_dir, get_settings())]
    assert names == ["ACC.yaml", "ENC.yaml"]


def test_custom_index_name(sample_dir, tmp_path):
    shutil.copy(sample_dir / "INDEX.yaml", tmp_path / "rules.yml")
    shutil.copy(sample_dir / "ACC.yaml", tmp_path / "ACC.yml")
    settings = get_settings(index_name="rules.yml", aspect_glob="*.yml")
    rulebook = load_rulebook(tmp_path, settings=settings)
    assert [aspect.value.id for aspect in rulebook.get_aspects()] == ["ACC"]


def test_missing_directory(tmp_path):
    with pytest.raises(ConfigError, match="not existing"):
        load_rulebook(tmp_path / "absent")


def test_path_is_not_a_directory(tmp_path):
    target = tmp_path / "file.yaml"
    target.write_text("Id: X\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="not a directory"):
        load_rulebook(target)


def test_missing_index(tmp_path):
    with pytest.raises(ConfigError, match="INDEX.yaml"):
        load_rulebook(tmp_path)


def test_parse_errors_propagate(sample_dir, tmp_path):
    shutil.copy(sample_dir / "INDEX.yaml", tmp_path / "INDEX.yaml")
    (tmp_path / "BAD.yaml").write_text("Id: [unterminated\n", encoding="utf-8")
    with pytest.raises(SyntacticParseError) as excinfo:
        load_rulebook(tmp_path)
    assert excinfo.value.file.endswith("BAD.yaml")


def test_cross_references_are_validated(sample_dir, tmp_path):
    shutil.copy(sample_dir / "INDEX.yaml", tmp_path / "INDEX.yaml")
    shutil.copy(sample_dir / "ENC.yaml", tmp_path / "ENC.yaml")
    with pytest.raises(CrossReferenceError, match='aspect with id "ACC" is not defined'):
        load_rulebook(tmp_path)


def test_progress_is_logged(sample_dir, caplog):
    logger = logging.getLogger("tests.rulebook.loader")
    with caplog.at_level(logging.INFO, logger="tests.rulebook.loader"):
        load_rulebook(sample_dir, logger=logger)
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("loading rulebook index") for message in messages)
    assert "validating rulebook cross-references" in messages
