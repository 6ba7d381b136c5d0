# === NAVMAP v1 ===
# {
#   "module": "Rulebook.generator",
#   "purpose": "Transform the validated rulebook model into HTML markup",
#   "sections": [
#     {"id": "formats", "name": "Output Formats", "anchor": "FMT", "kind": "constants"},
#     {"id": "tiers", "name": "compute_tiers", "anchor": "function-compute-tiers", "kind": "function"},
#     {"id": "generator", "name": "RulebookGenerator", "anchor": "class-rulebookgenerator", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Transform the validated rulebook model into HTML markup.

The generator reads the repository without mutating it and builds the body
markup with :class:`~Rulebook.markup.MarkupBuilder`.  Two presentation
policies are implemented:

``card``
    One card per aspect with an objective header, optional editing/validity
    columns, a colour-coded assessment ladder and a two-column relations
    block.
``prose``
    A bulleted list narrating each aspect's obligations in sentences.

``app`` is accepted but only emits empty aspect containers.  The body is
finally spliced into the packaged HTML template.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .errors import GenerationError, RulebookStateError
from .markup import MarkupBuilder
from .positions import resolve_position
from .rendering import md_to_html, ref_to_html
from .repository import Artifact, Repository
from .schema import RELATION_TYPES, AspectDocument, AssessmentLevel, IndexDocument
from .template import render_template

__all__ = [
    "CONTROL_REF",
    "DEFAULT_FORMAT",
    "FORMATS",
    "RulebookGenerator",
    "compute_tiers",
    "optimize_labels",
]

LOGGER = logging.getLogger(__name__)

# --- Output Formats ---

DEFAULT_FORMAT = "card"
FORMATS: Tuple[str, ...] = ("card", "prose", "app")

CONTROL_REF = "ctx:Control.msg-CTO"
_TIER_SCAN_ORDER = ("WONT", "MAY", "SHOULD", "MUST")
_PROSE_TAGS = ("MUST", "SHOULD", "MAY")


def compute_tiers(levels: Sequence[AssessmentLevel]) -> List[str]:
    """Derive the criticality tier of each level, highest level first.

    A level whose statements tag :data:`CONTROL_REF` sets its tier and
    propagates it to every lower level; a ``MUST`` tier applies only to the
    level that declared it.  Levels reached by no declaration stay ``NONE``.
    """

    tiers = ["NONE"] * len(levels)
    for i, level in enumerate(levels):
        statements = level.assess or []
        for tag in _TIER_SCAN_ORDER:
            if any(statement.get(tag) == CONTROL_REF for statement in statements):
                for j in range(i, len(levels)):
                    tiers[j] = "NONE" if tag == "MUST" and j > i else tag
                break
    return tiers


def optimize_labels(levels: Sequence[AssessmentLevel]) -> List[str]:
    return [level.optimize for level in levels if level.optimize is not None]


class RulebookGenerator:
    """Render the repository into one of the :data:`FORMATS`."""

    def __init__(self, repository: Repository, *, logger: Optional[logging.Logger] = None) -> None:
        self.repository = repository
        self.logger = logger or LOGGER

    def render(self, format: str = DEFAULT_FORMAT, *, indent: int = 4, level: int = 2) -> str:
        """Render the complete HTML document.

        Args:
            format: One of :data:`FORMATS`.
            indent: Spaces per nesting level of the body markup.
            level: Nesting depth the body starts at inside the template.

        Returns:
            HTML document with the template placeholders substituted.

        Raises:
            RulebookStateError: If no index has been loaded.
            GenerationError: If the format is unknown or the model cannot be
                rendered (missing Optimize labels, bad reference literal).
        """

        body = self.build(format).render(indent=indent, level=level)
        return render_template(body)

    def build(self, format: str = DEFAULT_FORMAT) -> MarkupBuilder:
        """Build the body markup tree for ``format``."""

        if format not in FORMATS:
            raise GenerationError(f'unknown output format "{format}" (expected one of {", ".join(FORMATS)})')
        index = self.repository.get_index()
        if index is None:
            raise RulebookStateError("index still not loaded")

        html = MarkupBuilder()
        self._prolog(html, index.value)

        aspects = self.repository.get_aspects()
        self.logger.debug("rendering %d aspects as %s", len(aspects), format)
        if format == "prose":
            html.add("<ul>")
            html.open()
        for aspect in aspects:
            if format == "prose":
                html.add("<li>")
                html.open()
            with html.scope(f'<div class="aspect aspect-{format}">', "</div>"):
                self._aspect(html, aspect, format)
            if format == "prose":
                html.close()
                html.add("</li>")
        if format == "prose":
            html.close()
            html.add("</ul>")
        return html

    def _prolog(self, html: MarkupBuilder, index: IndexDocument) -> None:
        with html.scope('<div class="cover">', "</div>"):
            html.add(f'<div class="title">{index.name}</div>')
            html.add(f'<div class="description">{md_to_html(index.description)}</div>')
            html.add(f'<div class="version">Version: {index.version}</div>')

    def _aspect(self, html: MarkupBuilder, artifact: Artifact[AspectDocument], format: str) -> None:
        aspect = artifact.value
        if format == "card":
            self._card_header(html, aspect)
            html.add('<div class="subtitle">ASSESSMENT</div>')
        elif format == "prose":
            self._prose_header(html, aspect)

        levels = [level for _, level in aspect.assessment.levels()]
        if format == "card":
            with html.scope('<div class="assessment">', "</div>"):
                self._space(html, artifact, levels)
                self._card_levels(html, aspect, levels)
        else:
            with html.scope("<ul>", "</ul>"):
                if format == "prose":
                    self._prose_levels(html, levels)

        if format == "card" and aspect.relations:
            self._relations(html, aspect)

    # --- card ---

    def _card_header(self, html: MarkupBuilder, aspect: AspectDocument) -> None:
        html.add(f'<div class="title"><a name="{aspect.id}">{aspect.id}: {aspect.name}</a></div>')
        with html.scope('<div class="header">', "</div>"):
            with html.scope('<div class="header-left">', "</div>"):
                html.add('<div class="subtitle">OBJECTIVE</div>')
                html.add(f'<div class="objective">{md_to_html(aspect.objective)}</div>')
            if aspect.editing is not None:
                with html.scope('<div class="header-right-1">', "</div>"):
                    html.add('<div class="subtitle">EDITING</div>')
                    self._date_row(html, "Created", aspect.editing.created)
                    self._date_row(html, "Modified", aspect.editing.modified)
            if aspect.validity is not None:
                with html.scope('<div class="header-right-2">', "</div>"):
                    html.add('<div class="subtitle">VALIDITY</div>')
                    self._date_row(html, "From", aspect.validity.valid_from)
                    self._date_row(html, "Until", aspect.validity.until)

    @staticmethod
    def _date_row(html: MarkupBuilder, label: str, value: str) -> None:
        with html.scope('<div class="row">', "</div>"):
            html.add(f'<div class="label">{label}</div><div class="date">{value}</div>')

    def _space(
        self,
        html: MarkupBuilder,
        artifact: Artifact[AspectDocument],
        levels: Sequence[AssessmentLevel],
    ) -> None:
        with html.scope('<div class="space">', "</div>"):
            if len(levels) < 2:
                html.add('<div class="bg empty"></div>')
                return
            labels = optimize_labels(levels)
            if len(labels) < 2:
                which = "first/top" if not labels else "second/bottom"
                raise self._generation_error(
                    f"{which} Optimize information missing in assessment of aspect {artifact.value.id}",
                    artifact,
                    ["Assessment"],
                )
            with html.scope('<div class="bg">', "</div>"):
                with html.scope('<svg viewBox="0 0 100 100" preserveAspectRatio="none">', "</svg>"):
                    html.add('<polygon class="triangle-top" points="0,0 100,0 0,100"/>')
                    html.add('<polygon class="triangle-bottom" points="100,0 100,100 0,100"/>')
            html.add(f'<div class="optimize-top">{labels[0]}</div>')
            html.add(f'<div class="optimize-bottom">{labels[1]}</div>')

    def _card_levels(
        self,
        html: MarkupBuilder,
        aspect: AspectDocument,
        levels: Sequence[AssessmentLevel],
    ) -> None:
        tiers = compute_tiers(levels)
        with html.scope('<div class="levels">', "</div>"):
            for level, tier in zip(levels, tiers):
                with html.scope(f'<div class="level {tier}">', "</div>"):
                    html.add('<div class="color"></div>')
                    with html.scope('<div class="name">', "</div>"):
                        html.add(f'<a name="{aspect.id}-{level.id}">{level.id}</a>')
                    with html.scope('<div class="info">', "</div>"):
                        self._info_row(html, "what", "What", md_to_html(level.what))
                        if level.why:
                            self._info_row(html, "why", "Why", md_to_html(level.why))
                        if level.assess:
                            with html.scope('<div class="row">', "</div>"):
                                html.add('<div class="label assess">Assess</div>')
                                with html.scope('<div class="value assess">', "</div>"):
                                    self._assess_refs(html, level)
                        if level.sota:
                            self._info_row(html, "sota", "SotA", md_to_html(level.sota))

    @staticmethod
    def _info_row(html: MarkupBuilder, css: str, label: str, value: str) -> None:
        with html.scope('<div class="row">', "</div>"):
            html.add(f'<div class="label {css}">{label}</div>')
            html.add(f'<div class="value {css}">{value}</div>')

    @staticmethod
    def _assess_refs(html: MarkupBuilder, level: AssessmentLevel) -> None:
        first = True
        for statement in level.assess or []:
            primary = statement.primary()
            if primary is None:
                continue
            tag, ref = primary
            if not first:
                html.append(", ")
            first = False
            html.append(f'{ref_to_html(ref)}: <span class="assess">{tag}</span>')

    def _relations(self, html: MarkupBuilder, aspect: AspectDocument) -> None:
        relations = aspect.relations or []
        html.add('<div class="subtitle">RELATIONS</div>')
        with html.scope('<div class="relations">', "</div>"):
            html.add('<div class="column">')
            html.open()
            for relation_type in RELATION_TYPES:
                if relation_type == "Demand":
                    html.close()
                    html.add("</div>")
                    html.add('<div class="column">')
                    html.open()
                refs = [relation.get(relation_type) for relation in relations]
                refs = [ref for ref in refs if ref]
                if not refs:
                    continue
                with html.scope('<div class="row">', "</div>"):
                    html.add(f'<div class="type">{relation_type}</div>')
                    with html.scope('<div class="refs">', "</div>"):
                        html.add(", ".join(ref_to_html(ref) for ref in refs))
            html.close()
            html.add("</div>")

    # --- prose ---

    def _prose_header(self, html: MarkupBuilder, aspect: AspectDocument) -> None:
        with html.scope(f'<a name="{aspect.id}">', "</a>"):
            with html.scope('<span class="title">', "</span>"):
                html.add(f'<span class="id">{aspect.id}</span>: ')
                html.add(f'<span class="name">{aspect.name}</span>')
        html.add("<br/>")
        html.add(f'<span class="objective">{md_to_html(aspect.objective)}</span>')

    def _prose_levels(self, html: MarkupBuilder, levels: Sequence[AssessmentLevel]) -> None:
        for level in levels:
            statements = level.assess or []
            if not any(statement.get(tag) is not None for statement in statements for tag in _PROSE_TAGS):
                continue
            with html.scope("<li>", "</li>"):
                html.add(f'<span class="id">{level.id}</span>: ')
                first = True
                for tag in _PROSE_TAGS:
                    for statement in statements:
                        ref = statement.get(tag)
                        if ref is None:
                            continue
                        if not first:
                            html.append(", and ")
                        first = False
                        html.append(f"{ref_to_html(ref)} demands you ")
                        html.append(f'<span class="assess">{tag}</span>')
                html.append(": ")
                html.append(_quoted(f'<span class="what">{md_to_html(level.what)}</span>'))
                if level.why:
                    html.append(", because of ")
                    html.append(_quoted(md_to_html(level.why)))
                html.append(".")
                if level.sota:
                    html.append(' <span class="sota">For this you can use: ')
                    html.append(_quoted(md_to_html(level.sota)))
                    html.append(".</span>")

    @staticmethod
    def _generation_error(message: str, artifact: Artifact, path: List[str]) -> GenerationError:
        position = resolve_position(artifact.source, artifact.tree, path)
        return GenerationError(
            message,
            source=artifact.source,
            file=artifact.file,
            line=position.line if position else None,
            column=position.column if position else None,
        )


def _quoted(fragment: str) -> str:
    return f'<span class="quote">&laquo;</span>{fragment}<span class="quote">&raquo;</span>'
