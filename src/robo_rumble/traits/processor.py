"""Trait processor -- turns NFT metadata into battle-ready units.

Pipeline for a primary unit:

1. ``extract_traits``   -- attribute list -> ``{category: value}``
2. ``derive_element``   -- pluggable scorer + neutral threshold
3. ``derive_stats``     -- base stats -> element modifiers -> trait deltas
                           -> minimum clamp
4. ``derive_abilities`` -- basic ability + combination rules, capped by rarity

Companions skip element scoring: their element, abilities and power tier
come from the companion profile keyed by ``Robopet Type``.

Malformed or missing trait data never raises; absent categories simply
contribute nothing.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from robo_rumble.config import DEFAULT_CONFIG, EngineConfig
from robo_rumble.defs import (
    STAT_NAMES,
    AbilityDefinition,
    Element,
    TraitStatCategory,
    TraitStatTable,
)
from robo_rumble.sim.content.registry import ContentRegistry, default_registry
from robo_rumble.sim.core.entities import CombatUnit, Stats, UnitKind, round_half_up
from robo_rumble.sim.core.rng import GameRNG

from .scoring import ElementScorer, KeywordScorer, pick_element

logger = logging.getLogger(__name__)

COMPANION_TYPE_TRAIT = "Robopet Type"
_TIER_STATS = ("hp", "attack", "defense", "energy")
_TIER_STEP = 0.1


def extract_traits(attributes: Iterable[Any] | None) -> dict[str, str]:
    """Flatten an NFT attribute list into ``{trait_type: value}``.

    Anything other than a list-like of entries yields ``{}``.  Entries
    that are not mappings, lack either key, or have an empty value are
    skipped.  Non-string values are stringified; later duplicates
    overwrite earlier ones.
    """
    traits: dict[str, str] = {}
    if not isinstance(attributes, Iterable) or isinstance(attributes, (str, bytes, Mapping)):
        return traits
    for attr in attributes:
        if not isinstance(attr, Mapping):
            continue
        trait_type = attr.get("trait_type")
        value = attr.get("value")
        if not trait_type or value is None or value == "":
            continue
        traits[str(trait_type)] = str(value)
    return traits


def _token_of(metadata: Mapping[str, Any]) -> str:
    token = metadata.get("tokenId")
    if token is None or token == "":
        token = metadata.get("id", "unknown")
    return str(token)


class TraitProcessor:
    """Derives :class:`CombatUnit` objects from NFT metadata.

    Parameters
    ----------
    registry:
        Content tables.  Defaults to :func:`default_registry`.
    scorer:
        Element scoring strategy.  Defaults to :class:`KeywordScorer`.
    config:
        Engine constants (only ``max_abilities`` is used here).
    """

    def __init__(
        self,
        registry: ContentRegistry | None = None,
        scorer: ElementScorer | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.scorer = scorer or KeywordScorer()
        self.config = config or DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def process_primary(
        self, metadata: Mapping[str, Any], rng: GameRNG | None = None
    ) -> CombatUnit:
        """Build a primary (Roboto) unit from token metadata.

        Parameters
        ----------
        metadata:
            Mapping with ``tokenId`` (or ``id``), ``name``, ``image`` and
            ``attributes``.  Any of them may be missing.
        rng:
            Source for random stat ranges.  When ``None``, an RNG seeded
            from the traits is used so the same token always derives the
            same stats.
        """
        token = _token_of(metadata)
        traits = extract_traits(metadata.get("attributes"))
        element = self.derive_element(traits)
        stats = self.derive_stats(
            traits, element, self.base_stats(UnitKind.PRIMARY), rng=rng
        )
        abilities = self.derive_abilities(traits, UnitKind.PRIMARY, element=element)
        unit = self._build_unit(
            f"roboto-{token}",
            metadata.get("name") or f"Roboto #{token}",
            UnitKind.PRIMARY,
            element,
            stats,
            abilities,
            traits,
            metadata.get("image") or "",
        )
        logger.debug("Derived %s: %s %s", unit.id, element.value, stats)
        return unit

    def process_companion(
        self, metadata: Mapping[str, Any], rng: GameRNG | None = None
    ) -> CombatUnit:
        """Build a companion (Robopet) unit from token metadata.

        Element, abilities and power tier come from the companion profile
        for the token's ``Robopet Type``.  The tier multiplier
        ``1 + (tier - 1) * 0.1`` scales hp, attack, defense and energy.
        """
        token = _token_of(metadata)
        traits = extract_traits(metadata.get("attributes"))
        profile = self.registry.get_companion_profile(traits.get(COMPANION_TYPE_TRAIT))
        stats = self.derive_stats(
            traits, profile.element, self.base_stats(UnitKind.COMPANION), rng=rng
        )
        tier_multiplier = 1 + (profile.power_tier - 1) * _TIER_STEP
        values = stats.as_dict()
        for stat in _TIER_STATS:
            values[stat] = round_half_up(values[stat] * tier_multiplier)
        stats = Stats(**values)
        abilities = self.derive_abilities(traits, UnitKind.COMPANION)
        return self._build_unit(
            f"robopet-{token}",
            metadata.get("name") or f"Robopet #{token}",
            UnitKind.COMPANION,
            profile.element,
            stats,
            abilities,
            traits,
            metadata.get("image") or "",
        )

    def _build_unit(
        self,
        unit_id: str,
        name: str,
        kind: UnitKind,
        element: Element,
        stats: Stats,
        abilities: tuple[str, ...],
        traits: dict[str, str],
        image_url: str,
    ) -> CombatUnit:
        return CombatUnit(
            id=unit_id,
            name=str(name),
            kind=kind,
            element=element,
            stats=stats,
            abilities=abilities,
            strong_against=tuple(self.registry.strong_against(element)),
            weak_against=tuple(self.registry.weak_against(element)),
            image_url=str(image_url),
            traits=traits,
        )

    # ------------------------------------------------------------------
    # Element
    # ------------------------------------------------------------------

    def score_elements(self, traits: Mapping[str, str]) -> dict[Element, float]:
        return self.scorer.score(traits, self.registry.trait_elements)

    def derive_element(self, traits: Mapping[str, str]) -> Element:
        """Return the dominant combat element, or NEUTRAL for weak signals."""
        scores = self.score_elements(traits)
        return pick_element(scores, self.registry.trait_elements.neutral_threshold)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def base_stats(self, kind: UnitKind) -> Stats:
        table = self._stat_table()
        return Stats(**table.base_stats[kind.value])

    def derive_stats(
        self,
        traits: Mapping[str, str],
        element: Element,
        base_stats: Stats | None = None,
        *,
        rng: GameRNG | None = None,
    ) -> Stats:
        """Compute a unit's stats.

        Parameters
        ----------
        traits:
            Trait category -> value.
        element:
            The unit's element; its stat modifiers are applied to the
            *base* value of each stat before any trait delta.
        base_stats:
            Starting point.  Defaults to the primary base stats.
        rng:
            Source for ranged element modifiers.  Defaults to an RNG
            seeded from *traits*.

        Returns
        -------
        Stats
            Every stat clamped to at least its table minimum.
        """
        table = self._stat_table()
        if base_stats is None:
            base_stats = self.base_stats(UnitKind.PRIMARY)
        if rng is None:
            rng = GameRNG.from_text(json.dumps(sorted(traits.items())))

        base = base_stats.as_dict()
        values = dict(base)

        defn = self.registry.get_element(element)
        if defn is not None:
            for stat, modifier in defn.stat_modifiers.items():
                value = base[stat]
                if modifier.multiplier is not None:
                    value = round_half_up(base[stat] * modifier.multiplier)
                elif modifier.range is not None:
                    low, high = modifier.range
                    value = round_half_up(base[stat] * rng.uniform(low, high))
                values[stat] = value + modifier.flat

        for category in table.categories:
            for delta in self._category_deltas(category, traits):
                for stat, amount in delta.items():
                    values[stat] += amount

        for stat in STAT_NAMES:
            values[stat] = max(values[stat], table.minimums.get(stat, 0), 0)
        return Stats(**values)

    @staticmethod
    def _category_deltas(
        category: TraitStatCategory, traits: Mapping[str, str]
    ) -> list[dict[str, int]]:
        value = None
        for name in (category.category, *category.aliases):
            if traits.get(name):
                value = traits[name]
                break
        if value is None:
            return []

        entries = [v.strip() for v in value.split(",")] if category.multi_value else [value]
        deltas: list[dict[str, int]] = []
        for entry in entries:
            row = category.values.get(entry, category.default)
            if row:
                deltas.append(dict(row))
        return deltas

    def _stat_table(self) -> TraitStatTable:
        if self.registry.trait_stats is None:
            raise ValueError("Trait stat table is not loaded")
        return self.registry.trait_stats

    # ------------------------------------------------------------------
    # Abilities
    # ------------------------------------------------------------------

    def derive_abilities(
        self,
        traits: Mapping[str, str],
        kind: UnitKind = UnitKind.PRIMARY,
        element: Element | None = None,
    ) -> tuple[str, ...]:
        """Return the unit's unlocked ability ids.

        Primary units get the basic ability of their element, then every
        real and idealized combination whose requirements all match.
        Companions get their profile's list.  Results over the cap keep
        the highest rarities, stable among equals.
        """
        if kind == UnitKind.COMPANION:
            profile = self.registry.get_companion_profile(traits.get(COMPANION_TYPE_TRAIT))
            return self._cap(list(dict.fromkeys(profile.abilities)))

        if element is None:
            element = self.derive_element(traits)
        combinations = self.registry.combinations
        abilities: list[str] = []
        basic = self.registry.basic_ability_for(element)
        if basic is not None:
            abilities.append(basic)
        if combinations is not None:
            for rule in (*combinations.real, *combinations.idealized):
                if rule.id not in abilities and rule.matches(traits):
                    abilities.append(rule.id)
        return self._cap(abilities)

    def _cap(self, abilities: list[str]) -> tuple[str, ...]:
        limit = self.config.max_abilities
        if len(abilities) <= limit:
            return tuple(abilities)

        def rank(ability_id: str) -> int:
            ability = self.registry.get_ability(ability_id)
            return ability.rarity.rank if ability else -1

        kept = sorted(abilities, key=rank, reverse=True)[:limit]
        logger.debug("Ability cap %d dropped %s", limit, sorted(set(abilities) - set(kept)))
        return tuple(kept)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_ability_data(self, ability_id: str) -> AbilityDefinition | None:
        return self.registry.get_ability(ability_id)

    def get_element_color(self, element: Element | str) -> str:
        return self.registry.element_color(element)

    def get_element_symbol(self, element: Element | str) -> str:
        return self.registry.element_symbol(element)
