"""
File handling utilities using pathlib.

Only reading is needed: rule documents are produced elsewhere and treated
as read-only input.
"""

import json
from pathlib import Path
from typing import Any
from loguru import logger

from rules_engine.exceptions import FileHandlerError


def read_file(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read text file.

    Args:
        file_path: Path to file
        encoding: Text encoding

    Returns:
        File contents as string
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileHandlerError(f"File not found: {file_path}")

    try:
        return file_path.read_text(encoding=encoding)
    except OSError as e:
        raise FileHandlerError(f"Failed to read {file_path}: {e}")


def read_json(file_path: Path) -> Any:
    """
    Read JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed JSON value (usually a dict, catalogs may be lists)
    """
    content = read_file(file_path)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise FileHandlerError(f"Invalid JSON in {file_path}: {e}")

    logger.debug(f"Read JSON: {file_path}")
    return data
