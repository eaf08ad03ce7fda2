"""
assertnarrow AST Transformers
=============================

Lark tree -> snippet statements, expressions and type terms.
"""

from .base import SnippetTransformer
from .types import TypeNotationTransformer

__all__ = [
    'SnippetTransformer',
    'TypeNotationTransformer',
]
