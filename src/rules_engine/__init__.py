"""
Rules search and cross-reference engine for tabletop rulebooks.
"""

from rules_engine.engine import RulesEngine
from rules_engine.schemas.database import RulesDatabase

__version__ = "1.0.0"

__all__ = [
    "RulesEngine",
    "RulesDatabase",
]
