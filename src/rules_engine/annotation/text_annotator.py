"""
Turn rule prose into typed spans.

Processing order:
    1. `@Marker` references are resolved first, so markers keep working
       inside emphasis
    2. emphasis: ***bold-italic***, then **bold**, then *italic*
    3. remaining text is split on whitespace and punctuation, keeping
       every delimiter
    4. optionally, plain words that name a rule become keyword links

The annotator only decides span kinds and targets. Rendering, tooltips and
routing belong to the presentation layer.
"""

import re
from typing import List, Optional, Tuple
from loguru import logger

from rules_engine.schemas.references import ReferenceTarget
from rules_engine.schemas.spans import Span, SpanKind
from rules_engine.search.reference_resolver import ReferenceResolver

MARKER_RE = re.compile(r"@(\w+)")

# Highest precedence first
EMPHASIS_PATTERNS: Tuple[Tuple[SpanKind, "re.Pattern[str]"], ...] = (
    (SpanKind.BOLD_ITALIC, re.compile(r"\*\*\*(.+?)\*\*\*")),
    (SpanKind.BOLD, re.compile(r"\*\*(.+?)\*\*")),
    (SpanKind.ITALIC, re.compile(r"\*(.+?)\*")),
)

PUNCTUATION = ".,!?;:()[]{}'\"“”-"
DELIMITER_RE = re.compile(r"(\s+|[" + re.escape(PUNCTUATION) + r"])")
PUNCTUATION_RE = re.compile(r"[" + re.escape(PUNCTUATION) + r"]")

# Private-use range holding the placeholder delimiters
_PRIVATE_USE = range(0xE000, 0xF900)

_Segment = Tuple[SpanKind, str]


class _Placeholders:
    """
    Parks resolved markers as delimited indexes during emphasis parsing.

    Delimiters are private-use characters absent from the text, so input
    never collides with a placeholder.
    """

    def __init__(self, text: str):
        unused = (chr(c) for c in _PRIVATE_USE if chr(c) not in text)
        self.open = next(unused)
        self.close = next(unused)
        self.pattern = re.compile(re.escape(self.open) + r"(\d+)" + re.escape(self.close))

    def make(self, n: int) -> str:
        return f"{self.open}{n}{self.close}"


class TextAnnotator:
    """
    Annotates free text against a ReferenceResolver.
    """

    def __init__(self, resolver: ReferenceResolver):
        """
        Initialize annotator.

        Args:
            resolver: Lookup used for `@markers` and keyword links
        """
        self.resolver = resolver

    def annotate(self, text: str, references_only: bool = True) -> List[Span]:
        """
        Annotate text.

        Args:
            text: Prose with optional `@markers` and `*`-emphasis
            references_only: When False, plain words naming a rule are
                linked as well

        Returns:
            Spans in original left-to-right order
        """
        if not isinstance(text, str) or not text:
            return []

        placeholders = _Placeholders(text)
        markers: List[Tuple[str, ReferenceTarget]] = []
        working = self._replace_markers(text, markers, placeholders)

        segments: List[_Segment] = [(SpanKind.PLAIN, working)]
        for kind, pattern in EMPHASIS_PATTERNS:
            segments = self._apply_emphasis(segments, kind, pattern)

        spans: List[Span] = []
        for kind, segment_text in segments:
            for piece, target in self._expand_markers(segment_text, markers, placeholders):
                if target is not None:
                    spans.append(Span(kind=SpanKind.REFERENCE_LINK, text=piece, target=target))
                elif kind == SpanKind.PLAIN:
                    spans.extend(self._plain_spans(piece, references_only))
                elif piece:
                    spans.append(Span(kind=kind, text=piece))

        merged = self._merge_plain(spans)
        logger.debug(
            f"Annotated {len(text)} chars into {len(merged)} spans "
            f"({len(markers)} references)"
        )
        return merged

    def _replace_markers(
        self,
        text: str,
        markers: List[Tuple[str, ReferenceTarget]],
        placeholders: _Placeholders
    ) -> str:
        """Swap resolved markers for placeholders; unresolved ones stay literal"""

        def replace(match: "re.Match[str]") -> str:
            marker = match.group(0)
            target = self.resolver.resolve(marker)
            if target is None:
                return marker
            markers.append((marker, target))
            return placeholders.make(len(markers) - 1)

        return MARKER_RE.sub(replace, text)

    @staticmethod
    def _apply_emphasis(
        segments: List[_Segment],
        kind: SpanKind,
        pattern: "re.Pattern[str]"
    ) -> List[_Segment]:
        """Split plain segments on one emphasis level; other segments are final"""
        result: List[_Segment] = []
        for segment_kind, segment_text in segments:
            if segment_kind != SpanKind.PLAIN:
                result.append((segment_kind, segment_text))
                continue

            pos = 0
            for match in pattern.finditer(segment_text):
                if match.start() > pos:
                    result.append((SpanKind.PLAIN, segment_text[pos:match.start()]))
                result.append((kind, match.group(1)))
                pos = match.end()
            if pos < len(segment_text):
                result.append((SpanKind.PLAIN, segment_text[pos:]))
        return result

    @staticmethod
    def _expand_markers(
        text: str,
        markers: List[Tuple[str, ReferenceTarget]],
        placeholders: _Placeholders
    ) -> List[Tuple[str, Optional[ReferenceTarget]]]:
        """Split text around placeholders, restoring each marker with its target"""
        pieces: List[Tuple[str, Optional[ReferenceTarget]]] = []
        pos = 0
        for match in placeholders.pattern.finditer(text):
            if match.start() > pos:
                pieces.append((text[pos:match.start()], None))
            marker, target = markers[int(match.group(1))]
            pieces.append((marker, target))
            pos = match.end()
        if pos < len(text):
            pieces.append((text[pos:], None))
        return pieces

    def _plain_spans(self, text: str, references_only: bool) -> List[Span]:
        """Tokenize plain text, optionally linking words that name a rule"""
        spans = []
        for token in DELIMITER_RE.split(text):
            if not token:
                continue

            target = None if references_only else self._keyword_target(token)
            if target is not None:
                spans.append(Span(kind=SpanKind.KEYWORD_LINK, text=token, target=target))
            else:
                spans.append(Span(kind=SpanKind.PLAIN, text=token))
        return spans

    def _keyword_target(self, token: str) -> Optional[ReferenceTarget]:
        clean = PUNCTUATION_RE.sub("", token.lower())
        if not clean or not clean.strip():
            return None

        target = self.resolver.resolve(clean)
        # Reference ids are only linked through their @marker
        if target is None or target.is_reference:
            return None
        return target

    @staticmethod
    def _merge_plain(spans: List[Span]) -> List[Span]:
        merged: List[Span] = []
        for span in spans:
            if (
                merged
                and span.kind == SpanKind.PLAIN
                and merged[-1].kind == SpanKind.PLAIN
            ):
                merged[-1] = Span(kind=SpanKind.PLAIN, text=merged[-1].text + span.text)
            else:
                merged.append(span)
        return merged
