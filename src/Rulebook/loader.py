"""Load a rulebook from a directory of YAML documents.

The directory holds one index document (``INDEX.yaml`` by default) and any
number of aspect documents, which are parsed in sorted file name order.
Cross references are validated once every document has been parsed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from .errors import ConfigError
from .rulebook import Rulebook
from .settings import RulebookSettings, get_settings

__all__ = ["aspect_files", "load_rulebook"]

LOGGER = logging.getLogger(__name__)


def aspect_files(directory: Path, settings: RulebookSettings) -> List[Path]:
    """Return aspect document paths in sorted order, excluding the index."""

    return sorted(
        path
        for path in directory.glob(settings.aspect_glob)
        if path.is_file() and path.name != settings.index_name
    )


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f'failed to read rulebook document "{path}": {exc}') from exc


def load_rulebook(
    directory: Union[str, Path],
    *,
    settings: Optional[RulebookSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> Rulebook:
    """Parse and cross-validate the rulebook stored in ``directory``.

    Args:
        directory: Rulebook source directory.
        settings: Optional settings; defaults to :func:`get_settings`.
        logger: Diagnostic sink for progress and rendered parse errors.

    Returns:
        Fully validated :class:`Rulebook`.

    Raises:
        ConfigError: If the directory or its index document is missing.
        RulebookParseError: If a document fails to parse or a reference
            does not resolve.
    """

    settings = settings or get_settings()
    log = logger or LOGGER
    directory = Path(directory)

    log.info('loading rulebook source "%s"', directory)
    if not directory.exists():
        raise ConfigError(f"rulebook source path {directory} not existing")
    if not directory.is_dir():
        raise ConfigError(f"rulebook source path {directory} not a directory")

    index_file = directory / settings.index_name
    if not index_file.is_file():
        raise ConfigError(f'rulebook index "{index_file}" not found')

    rulebook = Rulebook(logger=log)
    log.info('loading rulebook index "%s"', index_file)
    rulebook.parse_index(str(index_file), _read(index_file))
    for aspect_file in aspect_files(directory, settings):
        log.info('loading rulebook aspect "%s"', aspect_file)
        rulebook.parse_aspect(str(aspect_file), _read(aspect_file))
    log.info("validating rulebook cross-references")
    rulebook.validate_cross_refs()
    return rulebook
