"""Element scoring strategies.

A scorer turns a trait mapping into one score per combat element; the
processor then picks the winner.  :class:`KeywordScorer` adds a fuzzy
substring fallback for trait values the tables do not know about, and
:class:`TableOnlyScorer` trusts the tables alone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from robo_rumble.defs import COMBAT_ELEMENTS, Element, TraitElementTable

VERY_IMPORTANT_KEYWORD_WEIGHT = 3.0
IMPORTANT_KEYWORD_WEIGHT = 2.0


class ElementScorer(ABC):
    """Base class for element scoring strategies."""

    @abstractmethod
    def score(
        self,
        traits: Mapping[str, str],
        table: TraitElementTable,
    ) -> dict[Element, float]:
        """Score every combat element for *traits*.

        Parameters
        ----------
        traits:
            Trait category -> value, as produced by ``extract_traits``.
        table:
            The trait -> element weight table.

        Returns
        -------
        dict[Element, float]
            One entry per element of :data:`COMBAT_ELEMENTS`.
        """


class TableOnlyScorer(ElementScorer):
    """Table weights plus combination bonuses, nothing else.

    Weights of traits in the "very important" categories are multiplied
    by ``table.very_important_multiplier``.
    """

    def score(
        self,
        traits: Mapping[str, str],
        table: TraitElementTable,
    ) -> dict[Element, float]:
        scores = {element: 0.0 for element in COMBAT_ELEMENTS}
        for category, value in traits.items():
            weights = table.trait_mappings.get(category, {}).get(value)
            if weights is None:
                self.score_unmapped(category, value, table, scores)
                continue
            factor = (
                table.very_important_multiplier
                if category in table.very_important_categories
                else 1.0
            )
            for element, weight in weights.items():
                if element in scores:
                    scores[element] += weight * factor

        for rule in table.combination_bonuses:
            if rule.matches(traits):
                for element, bonus in rule.bonus.items():
                    if element in scores:
                        scores[element] += bonus
        return scores

    def score_unmapped(
        self,
        category: str,
        value: str,
        table: TraitElementTable,
        scores: dict[Element, float],
    ) -> None:
        """Hook for traits missing from the table.  Ignored by default."""


class KeywordScorer(TableOnlyScorer):
    """Table scoring with a keyword fallback for unmapped traits.

    An unmapped value in a very important (or important) category adds 3
    (or 2) points to the first element whose keyword bucket has a keyword
    contained in the lowercased value.

    Parameters
    ----------
    buckets:
        Element -> keywords.  Defaults to ``table.keyword_buckets``.
    """

    def __init__(self, buckets: Mapping[Element, Sequence[str]] | None = None) -> None:
        self._buckets = buckets

    def score_unmapped(
        self,
        category: str,
        value: str,
        table: TraitElementTable,
        scores: dict[Element, float],
    ) -> None:
        if category in table.very_important_categories:
            weight = VERY_IMPORTANT_KEYWORD_WEIGHT
        elif category in table.important_categories:
            weight = IMPORTANT_KEYWORD_WEIGHT
        else:
            return

        buckets = self._buckets if self._buckets is not None else table.keyword_buckets
        lowered = value.lower()
        for element in COMBAT_ELEMENTS:
            keywords = buckets.get(element, ())
            if any(keyword in lowered for keyword in keywords):
                scores[element] += weight
                return


def pick_element(scores: Mapping[Element, float], threshold: float = 1.0) -> Element:
    """Return the highest scoring element, or NEUTRAL below *threshold*.

    Ties go to the element that comes first in :data:`COMBAT_ELEMENTS`.
    """
    best = Element.NEUTRAL
    best_score = 0.0
    for element in COMBAT_ELEMENTS:
        value = scores.get(element, 0.0)
        if value > best_score:
            best, best_score = element, value
    if best_score < threshold:
        return Element.NEUTRAL
    return best
