"""Utils package exports"""

from rules_engine.utils.logger import setup_logger
from rules_engine.utils.file_handler import read_file, read_json

__all__ = [
    "setup_logger",
    "read_file",
    "read_json",
]
