"""
Case-insensitive lookup from titles, keywords and reference ids to link targets.

Registration happens in a fixed order and the last write wins on key
collisions:

    1. entry titles and keywords (index order)
    2. power names
    3. equipment names
    4. monster names
    5. explicit reference ids ('@Body', ...)

Reference ids are registered last and therefore override any title or
keyword with the same key.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional
from loguru import logger

from rules_engine.indexing.content_indexer import RulesIndex
from rules_engine.schemas.entries import SearchableEntry
from rules_engine.schemas.references import ReferenceTarget


class ReferenceResolver:
    """
    Immutable key -> ReferenceTarget mapping.

    Build with ReferenceResolver.build(); lookups never raise.
    """

    def __init__(self, mappings: Mapping[str, ReferenceTarget]):
        """
        Initialize resolver from already-lowercased mappings.

        Args:
            mappings: lowercase key -> target
        """
        self._mappings: Dict[str, ReferenceTarget] = dict(mappings)

    @classmethod
    def build(
        cls,
        index: RulesIndex,
        powers: Iterable[Any] = (),
        equipment: Iterable[Any] = (),
        monsters: Iterable[Any] = (),
    ) -> "ReferenceResolver":
        """
        Register every key source in the documented order.

        Args:
            index: Indexed rule content (entries + reference ids)
            powers: Power catalog items ({name, deck, description})
            equipment: Equipment catalog items ({name, description})
            monsters: Monster catalog items ({Name, Description})

        Returns:
            New ReferenceResolver
        """
        mappings: Dict[str, ReferenceTarget] = {}

        def register(key: str, target: ReferenceTarget) -> None:
            mappings[key.lower()] = target

        for entry in index.entries:
            for key in [entry.title, *entry.keywords]:
                register(key, cls._entry_target(entry, key))

        for key, target in cls._power_targets(powers):
            register(key, target)
        for key, target in cls._equipment_targets(equipment):
            register(key, target)
        for key, target in cls._monster_targets(monsters):
            register(key, target)

        for ref_id, ref_data in index.reference_ids.items():
            if isinstance(ref_data, dict):
                register(ref_id, cls._reference_target(ref_id, ref_data))

        logger.info(f"Built reference resolver with {len(mappings)} keys")
        return cls(mappings)

    @staticmethod
    def _entry_target(entry: SearchableEntry, key: str) -> ReferenceTarget:
        return ReferenceTarget(
            key=key,
            page=entry.category,
            path=entry.path,
            section=entry.section,
            description=entry.description,
            type=entry.type,
            title=entry.title,
        )

    @staticmethod
    def _power_targets(powers: Iterable[Any]) -> Iterator:
        for power in powers:
            if not isinstance(power, dict) or not isinstance(power.get("name"), str):
                continue
            name = power["name"]
            yield name, ReferenceTarget(
                key=name,
                page="Powers",
                path="/powers",
                section=name,
                description=f"{power.get('deck', '')} power - {power.get('description', '')}",
                type="power",
                title=name,
            )

    @staticmethod
    def _equipment_targets(equipment: Iterable[Any]) -> Iterator:
        for item in equipment:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                continue
            name = item["name"]
            yield name, ReferenceTarget(
                key=name,
                page="Equipment",
                path="/equipment",
                section=name,
                description=str(item.get("description") or ""),
                type="equipment",
                title=name,
            )

    @staticmethod
    def _monster_targets(monsters: Iterable[Any]) -> Iterator:
        for monster in monsters:
            if not isinstance(monster, dict) or not isinstance(monster.get("Name"), str):
                continue
            name = monster["Name"]
            yield name, ReferenceTarget(
                key=name,
                page="Monsters",
                path=f"/monsters/{name}",
                section=name,
                description=str(monster.get("Description") or ""),
                type="monster",
                title=name,
            )

    @staticmethod
    def _reference_target(ref_id: str, ref_data: Mapping[str, Any]) -> ReferenceTarget:
        category = str(ref_data.get("category") or "")
        section = ref_data.get("section")
        section = str(section) if section else None
        title = ref_data.get("title")

        path = f"/{category}"
        if section:
            path += f"#{section}"

        return ReferenceTarget(
            key=ref_id,
            page=category,
            path=path,
            section=section,
            description=str(ref_data.get("description") or ""),
            type="reference",
            title=str(title) if title else None,
        )

    def resolve(self, key: str) -> Optional[ReferenceTarget]:
        """
        Look up a key case-insensitively.

        Args:
            key: Title, keyword or reference id (with its '@')

        Returns:
            Target, or None when the key is unknown
        """
        if not isinstance(key, str):
            return None
        return self._mappings.get(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    @property
    def keys(self) -> List[str]:
        """Registered (lowercased) keys"""
        return list(self._mappings.keys())
