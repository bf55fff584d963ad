"""
Document loading.
"""

from rules_engine.parsers.rules_loader import RulesLoader, load_rules_database

__all__ = [
    "RulesLoader",
    "load_rules_database",
]
