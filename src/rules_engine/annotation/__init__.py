"""
Text annotation.
"""

from rules_engine.annotation.text_annotator import TextAnnotator

__all__ = [
    "TextAnnotator",
]
