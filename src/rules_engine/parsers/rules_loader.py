"""
Load rule documents from a data directory.

Layout:
    rules-database.json   {"rulesDatabase": {"categories": {key: {"file", "title"}},
                                              "quickReference": {...},
                                              "referenceIds": {...}}}
    <category file>       {"<anything>": {"title": ..., "sections": [...]}}
    powers.json           {"powers": [...]}            (optional)
    equipment.json        {"equipment": [...]}         (optional)
    monsters.json         [{"Name": ..., ...}, ...]    (optional)

Load failures raise DocumentLoadError. A category document without sections
is not a load failure; the indexer skips it.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
from loguru import logger

from rules_engine.config import settings
from rules_engine.exceptions import DocumentLoadError, FileHandlerError
from rules_engine.schemas.database import RulesDatabase
from rules_engine.utils.file_handler import read_json


class RulesLoader:
    """
    Reads the rules database and every category file it lists.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        database_file: Optional[str] = None
    ):
        """
        Initialize loader.

        Args:
            data_dir: Directory holding the JSON documents
            database_file: Name of the top-level database file
        """
        self.data_dir = Path(data_dir or settings.data_dir)
        self.database_file = database_file or settings.rules_database_file

    def load(self) -> RulesDatabase:
        """
        Load the complete document set.

        Returns:
            Immutable RulesDatabase
        """
        database_path = self.data_dir / self.database_file
        raw = self._read(database_path)

        if not isinstance(raw, dict) or not isinstance(raw.get("rulesDatabase"), dict):
            raise DocumentLoadError(f"Missing 'rulesDatabase' object in {database_path}")

        db = raw["rulesDatabase"]
        categories = db.get("categories") or {}
        if not isinstance(categories, dict):
            raise DocumentLoadError(f"'categories' must be an object in {database_path}")

        documents: Dict[str, Any] = {}
        category_titles: Dict[str, str] = {}

        for key, meta in categories.items():
            meta = meta if isinstance(meta, dict) else {}
            if meta.get("title"):
                category_titles[key] = meta["title"]

            file_name = meta.get("file")
            if not file_name:
                logger.warning(f"Category '{key}' has no file, skipping")
                continue

            documents[key] = self._main_document(self._read(self.data_dir / file_name))

        database = RulesDatabase(
            documents=documents,
            quick_reference=db.get("quickReference") or {},
            reference_ids=db.get("referenceIds") or {},
            category_titles=category_titles,
            powers=self._load_catalog(settings.powers_file, "powers"),
            equipment=self._load_catalog(settings.equipment_file, "equipment"),
            monsters=self._load_catalog(settings.monsters_file, None),
        )

        logger.info(
            f"Loaded rules database from {self.data_dir} "
            f"({len(documents)} categories, {len(database.reference_ids)} reference ids)"
        )
        return database

    def _read(self, path: Path) -> Any:
        try:
            return read_json(path)
        except FileHandlerError as e:
            raise DocumentLoadError(str(e)) from e

    @staticmethod
    def _main_document(raw: Any) -> Any:
        """Category files wrap the document in a single top-level key"""
        if isinstance(raw, dict) and raw:
            return next(iter(raw.values()))
        return None

    def _load_catalog(self, file_name: str, list_key: Optional[str]) -> List[Any]:
        """
        Load an optional catalog (powers, equipment, monsters).

        Missing or unreadable catalogs only disable their links.
        """
        path = self.data_dir / file_name
        if not path.exists():
            logger.warning(f"Catalog not found, skipping: {path}")
            return []

        try:
            raw = read_json(path)
        except FileHandlerError as e:
            logger.error(f"Error loading catalog {path}: {e}")
            return []

        if list_key is not None:
            raw = raw.get(list_key) if isinstance(raw, dict) else None

        return raw if isinstance(raw, list) else []


def load_rules_database(data_dir: Optional[Path] = None) -> RulesDatabase:
    """
    Convenience wrapper around RulesLoader.

    Args:
        data_dir: Directory holding the JSON documents

    Returns:
        Loaded RulesDatabase
    """
    return RulesLoader(data_dir).load()
