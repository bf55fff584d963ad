"""
Flatten per-category rule documents into searchable entries.

Documents are nested and heterogeneous: a section may carry stats, combat
actions, damage types, conditions, equipment rules or hunt phases next to
its own text. The indexer turns all of it into one ordered tuple of
SearchableEntry values and keeps deduplicated copies of the documents for
the ownership checks done at search time.
"""

import copy
import re
from types import MappingProxyType
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
from loguru import logger
from pydantic import ValidationError

from rules_engine.schemas.database import RulesDatabase
from rules_engine.schemas.entries import EntryType, SearchableEntry
from rules_engine.schemas.references import SourceLocation

SOURCE_KEY = "%Source"
QUICK_REFERENCE_PATH = "/quick-reference"

_MARKER_RE = re.compile(r"^[@%]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_marker(value: str) -> str:
    """Drop one leading '@' or '%' marker"""
    return _MARKER_RE.sub("", value)


def slugify(name: str) -> str:
    """'Heavy Strike' -> 'heavy-strike'"""
    return _WHITESPACE_RE.sub("-", name.lower())


def dedupe_sources(sources: List[Any]) -> List[str]:
    """
    Remove case-insensitive duplicates from a citation list.

    Args:
        sources: Raw citation list

    Returns:
        Citations in first-seen order
    """
    seen = set()
    result = []
    for source in sources:
        if not isinstance(source, str):
            continue
        key = source.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(source)
    return result


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _strings(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def section_sources(section: Mapping[str, Any]) -> Tuple[str, ...]:
    """Citation list of a section (empty when absent)"""
    return _strings(section.get(SOURCE_KEY))


def _dedupe_section_tree(sections: List[Dict[str, Any]]) -> None:
    for section in sections:
        if isinstance(section.get(SOURCE_KEY), list):
            section[SOURCE_KEY] = dedupe_sources(section[SOURCE_KEY])
        _dedupe_section_tree(_items(section.get("subsections")))


@dataclass(frozen=True)
class RulesIndex:
    """
    Immutable result of one indexing run.

    Attributes:
        entries: Searchable entries in derivation order
        documents: Deduplicated copies of every indexable category document
        category_titles: category key -> display title
        reference_ids: '@Ref' -> reference data
    """

    entries: Tuple[SearchableEntry, ...]
    documents: Mapping[str, Dict[str, Any]]
    category_titles: Mapping[str, str] = field(default_factory=dict)
    reference_ids: Mapping[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def categories(self) -> List[str]:
        return list(self.documents.keys())

    def sections(self, category: str) -> List[Dict[str, Any]]:
        """Indexed sections of a category, shared with search; do not modify"""
        document = self.documents.get(category)
        if document is None:
            return []
        return _items(document.get("sections"))

    def iter_sections(self) -> Iterator[Tuple[str, Dict[str, Any]]]:
        """(category, section) pairs in document order"""
        for category in self.documents:
            for section in self.sections(category):
                yield category, section

    def get_category_rules(self, category: str) -> Optional[Dict[str, Any]]:
        """Copy of a category document; edits never reach the index"""
        return copy.deepcopy(self.documents.get(category))

    def get_rule(self, category: str, section_id: str) -> Optional[Dict[str, Any]]:
        """First top-level section of `category` with the given id"""
        for section in self.sections(category):
            if section.get("id") == section_id:
                return copy.deepcopy(section)
        return None

    def get_source_map(self) -> Dict[str, List[SourceLocation]]:
        """
        Map every cited name to the sections that cite it.

        Subsections are scanned recursively; names keep their original
        casing and first-seen order.
        """
        source_map: Dict[str, List[SourceLocation]] = {}

        def scan(category: str, sections: List[Dict[str, Any]]) -> None:
            for section in sections:
                section_id = _text(section.get("id"))
                for name in section_sources(section):
                    source_map.setdefault(name, []).append(
                        SourceLocation(
                            category=category,
                            category_title=self.category_titles.get(category),
                            section_id=section_id,
                            section_title=_text(section.get("title")),
                            description=_text(section.get("description")),
                            path=f"/{category}#{section_id}",
                        )
                    )
                scan(category, _items(section.get("subsections")))

        for category in self.documents:
            scan(category, self.sections(category))

        return source_map

    def get_uncategorized_rules(self) -> List[str]:
        """Reference ids that no section cites"""
        sourced = set(self.get_source_map().keys())
        return [ref_id for ref_id in self.reference_ids if ref_id not in sourced]


class ContentIndexer:
    """
    Builds a RulesIndex from a RulesDatabase.

    The indexer is stateless; call build() again whenever documents change.
    """

    def build(self, database: RulesDatabase) -> RulesIndex:
        """
        Index a complete document set.

        Args:
            database: Loaded documents and lookup tables

        Returns:
            Freshly computed RulesIndex
        """
        documents = self._prepare_documents(database.documents)

        entries: List[SearchableEntry] = []
        entries.extend(self._quick_reference_entries(database.quick_reference))
        for category, document in documents.items():
            entries.extend(self._category_entries(category, document))

        logger.info(
            f"Indexed {len(entries)} entries from {len(documents)} categories"
        )

        return RulesIndex(
            entries=tuple(entries),
            documents=MappingProxyType(documents),
            category_titles=dict(database.category_titles),
            reference_ids=dict(database.reference_ids),
        )

    def _prepare_documents(self, raw_documents: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
        """Copy indexable documents and dedupe their citation lists"""
        documents: Dict[str, Dict[str, Any]] = {}
        for category, document in raw_documents.items():
            if not isinstance(document, dict) or not isinstance(document.get("sections"), list):
                logger.warning(f"Category '{category}' has no sections, skipping")
                continue

            document = copy.deepcopy(document)
            _dedupe_section_tree(_items(document["sections"]))
            documents[category] = document
        return documents

    def _quick_reference_entries(self, quick_reference: Mapping[str, Any]) -> Iterator[SearchableEntry]:
        for category, items in quick_reference.items():
            for item in _items(items):
                title = _text(item.get("term")) or _text(item.get("stat")) or _text(item.get("type"))
                entry = self._make_entry(
                    type=EntryType.QUICK_REFERENCE,
                    category=category,
                    title=title,
                    description=self._quick_reference_description(item),
                    keywords=_strings(item.get("keywords")),
                    path=QUICK_REFERENCE_PATH,
                    section=title,
                    id=title,
                    is_quick_reference=True,
                )
                if entry is not None:
                    yield entry

    @staticmethod
    def _quick_reference_description(item: Mapping[str, Any]) -> str:
        description = _text(item.get("description"))
        if description:
            return description

        uses = ", ".join(_strings(item.get("uses")))
        if uses:
            return uses

        effective_against = item.get("effective_against")
        if isinstance(effective_against, list):
            return ", ".join(_strings(effective_against))
        return _text(effective_against)

    def _category_entries(self, category: str, document: Dict[str, Any]) -> Iterator[SearchableEntry]:
        for section in _items(document.get("sections")):
            section_id = _text(section.get("id"))
            section_keywords = _strings(section.get("keywords"))
            sources = section_sources(section)

            candidates = [
                self._make_entry(
                    type=EntryType.RULE_SECTION,
                    category=category,
                    title=_text(section.get("title")),
                    description=_text(section.get("description")),
                    keywords=section_keywords,
                    path=f"/{category}#{section_id}",
                    section=_text(section.get("title")),
                    id=section_id,
                )
            ]

            # Subsections have no anchor of their own
            for sub in _items(section.get("subsections")):
                candidates.append(self._make_entry(
                    type=EntryType.RULE_SUBSECTION,
                    category=category,
                    title=_text(sub.get("title")),
                    description=_text(sub.get("description")),
                    keywords=_strings(sub.get("keywords")),
                    path=f"/{category}",
                    section=_text(sub.get("title")),
                    id=_text(sub.get("id")),
                ))

            for entry_type, key in (
                (EntryType.STAT, "content"),
                (EntryType.COMBAT_ACTION, "actions"),
            ):
                for item in _items(section.get(key)):
                    name = _text(item.get("name"))
                    slug = slugify(name)
                    candidates.append(self._make_entry(
                        type=entry_type,
                        category=category,
                        title=name,
                        description=_text(item.get("description")),
                        keywords=_strings(item.get("keywords")),
                        path=f"/{category}#{slug}",
                        section=name,
                        id=slug,
                        is_source_linked=True,
                        source_names=sources,
                    ))

            for item in _items(section.get("types")):
                candidates.append(self._make_entry(
                    type=EntryType.DAMAGE_TYPE,
                    category=category,
                    title=_text(item.get("name")),
                    description=_text(item.get("description")),
                    keywords=_strings(item.get("keywords")),
                    path=f"/{category}",
                    section=_text(item.get("name")),
                    examples=_strings(item.get("examples")),
                ))

            for item in _items(section.get("conditions")):
                candidates.append(self._make_entry(
                    type=EntryType.STATUS_CONDITION,
                    category=category,
                    title=_text(item.get("name")),
                    description=_text(item.get("description")),
                    keywords=_strings(item.get("keywords")),
                    path=f"/{category}",
                    section=_text(item.get("name")),
                ))

            for item in _items(section.get("equipment")):
                candidates.append(self._make_entry(
                    type=EntryType.EQUIPMENT_RULE,
                    category=category,
                    title=_text(item.get("name")),
                    description=_text(item.get("effect")),
                    keywords=_strings(item.get("keywords")),
                    path=f"/{category}",
                    section=_text(item.get("name")),
                ))

            for item in _items(section.get("phases")):
                name = _text(item.get("name"))
                candidates.append(self._make_entry(
                    type=EntryType.HUNT_PHASE,
                    category=category,
                    title=name,
                    description=_text(item.get("description")),
                    keywords=section_keywords + (name.lower(),),
                    path=f"/{category}",
                    section=name,
                ))

            for entry in candidates:
                if entry is not None:
                    yield entry

    @staticmethod
    def _make_entry(**fields: Any) -> Optional[SearchableEntry]:
        """Build an entry, skipping items without a usable title"""
        try:
            return SearchableEntry(**fields)
        except ValidationError:
            logger.debug(
                f"Skipping untitled {fields['type'].value} in '{fields['category']}'"
            )
            return None
