"""Trait processor: NFT metadata -> :class:`CombatUnit`."""

from .processor import TraitProcessor, extract_traits
from .scoring import ElementScorer, KeywordScorer, TableOnlyScorer, pick_element

__all__ = [
    "TraitProcessor",
    "extract_traits",
    "ElementScorer",
    "KeywordScorer",
    "TableOnlyScorer",
    "pick_element",
]
