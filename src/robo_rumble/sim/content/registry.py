"""Content registry -- loads and serves elements, abilities and the trait
tables used by the trait processor and the battle engine.

All tables are static JSON files in ``robo_rumble/data/``.  They are read
once, validated into Pydantic models, and cross-checked so that every
ability referenced by a rule actually exists.
"""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any

from robo_rumble.defs import (
    AbilityCombinationTable,
    AbilityDefinition,
    CompanionProfile,
    Element,
    ElementCombos,
    ElementDefinition,
    TraitElementTable,
    TraitStatTable,
    TypeChartSettings,
)

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parents[2] / "data"  # robo_rumble/sim/content -> robo_rumble
_DEFAULT_ELEMENTS_PATH = _DATA_DIR / "elements.json"
_DEFAULT_ABILITIES_PATH = _DATA_DIR / "abilities.json"
_DEFAULT_TRAIT_ELEMENTS_PATH = _DATA_DIR / "trait_elements.json"
_DEFAULT_TRAIT_STATS_PATH = _DATA_DIR / "trait_stats.json"
_DEFAULT_COMBINATIONS_PATH = _DATA_DIR / "ability_combinations.json"
_DEFAULT_COMPANIONS_PATH = _DATA_DIR / "companions.json"

DEFAULT_COMPANION_KEY = "default"
DEFAULT_COLOR = "#FFFFFF"
DEFAULT_SYMBOL = "?"


def _read_json(path: str | Path | None, default: Path) -> Any:
    path = Path(default if path is None else path)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class ContentRegistry:
    """Loads and serves every static table of the game.

    Usage::

        registry = ContentRegistry()
        registry.load_all()

        ability = registry.get_ability("volt_strike")
        m = registry.type_multiplier(Element.SURGE, Element.METAL)  # 1.5

    Most callers should use :func:`default_registry`, which loads the
    bundled tables once per process.
    """

    def __init__(self) -> None:
        self.elements: dict[Element, ElementDefinition] = {}
        self.type_chart = TypeChartSettings()
        self.combos = ElementCombos()
        self.abilities: dict[str, AbilityDefinition] = {}
        self.trait_elements = TraitElementTable()
        self.trait_stats: TraitStatTable | None = None
        self.combinations: AbilityCombinationTable | None = None
        self.companions: dict[str, CompanionProfile] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_all(self) -> ContentRegistry:
        """Load every bundled table and cross-check references.

        Returns
        -------
        ContentRegistry
            ``self``, so ``ContentRegistry().load_all()`` can be chained.
        """
        self.load_elements()
        self.load_abilities()
        self.load_trait_elements()
        self.load_trait_stats()
        self.load_ability_combinations()
        self.load_companions()
        self.validate()
        return self

    def load_elements(self, path: str | Path | None = None) -> None:
        """Load element definitions, the type chart settings and the combos.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to ``data/elements.json``
            inside the package.
        """
        raw: dict[str, Any] = _read_json(path, _DEFAULT_ELEMENTS_PATH)
        for entry in raw.get("elements", []):
            if "_section" in entry:
                continue  # Skip organizational section markers
            defn = ElementDefinition.model_validate(entry)
            self.elements[defn.id] = defn
        if "type_chart" in raw:
            self.type_chart = TypeChartSettings.model_validate(raw["type_chart"])
        if "combos" in raw:
            self.combos = ElementCombos.model_validate(raw["combos"])

    def load_abilities(self, path: str | Path | None = None) -> None:
        """Load ability definitions from a JSON list.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to ``data/abilities.json``.
        """
        raw_abilities: list[dict[str, Any]] = _read_json(path, _DEFAULT_ABILITIES_PATH)
        for raw in raw_abilities:
            if "_section" in raw:
                continue  # Skip organizational section markers
            ability = AbilityDefinition.model_validate(raw)
            if ability.id in self.abilities:
                logger.warning("Ability %r defined twice; keeping the later one", ability.id)
            self.abilities[ability.id] = ability

    def load_trait_elements(self, path: str | Path | None = None) -> None:
        self.trait_elements = TraitElementTable.model_validate(
            _read_json(path, _DEFAULT_TRAIT_ELEMENTS_PATH)
        )

    def load_trait_stats(self, path: str | Path | None = None) -> None:
        self.trait_stats = TraitStatTable.model_validate(
            _read_json(path, _DEFAULT_TRAIT_STATS_PATH)
        )

    def load_ability_combinations(self, path: str | Path | None = None) -> None:
        self.combinations = AbilityCombinationTable.model_validate(
            _read_json(path, _DEFAULT_COMBINATIONS_PATH)
        )

    def load_companions(self, path: str | Path | None = None) -> None:
        raw: dict[str, Any] = _read_json(path, _DEFAULT_COMPANIONS_PATH)
        self.companions = {
            key: CompanionProfile.model_validate(value) for key, value in raw.items()
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Cross-check the loaded tables.

        Raises
        ------
        ValueError
            If the type chart is inconsistent (``X`` strong against ``Y``
            without ``Y`` weak against ``X``), an element lists itself, or
            a rule references an ability that does not exist.
        """
        problems: list[str] = []

        for element, defn in self.elements.items():
            if element in defn.strong_against or element in defn.weak_against:
                problems.append(f"{element.value} lists itself in its type chart row")
            for other in defn.strong_against:
                other_defn = self.elements.get(other)
                if other_defn is None or element not in other_defn.weak_against:
                    problems.append(
                        f"{element.value} is strong against {other.value} "
                        f"but {other.value} is not weak against {element.value}"
                    )
            for other in defn.weak_against:
                other_defn = self.elements.get(other)
                if other_defn is None or element not in other_defn.strong_against:
                    problems.append(
                        f"{element.value} is weak against {other.value} "
                        f"but {other.value} is not strong against {element.value}"
                    )

        referenced: list[tuple[str, str]] = []
        if self.combinations is not None:
            referenced += [("basic", aid) for aid in self.combinations.basic.values()]
            referenced += [("real", rule.id) for rule in self.combinations.real]
            referenced += [("idealized", rule.id) for rule in self.combinations.idealized]
        for key, profile in self.companions.items():
            referenced += [(f"companion {key}", aid) for aid in profile.abilities]
        for source, ability_id in referenced:
            if ability_id not in self.abilities:
                problems.append(f"{source} rule references unknown ability {ability_id!r}")

        for ability in self.abilities.values():
            defn = self.elements.get(ability.element)
            for effect_id in ability.effects:
                if effect_id == "cleanse":
                    continue
                if defn is None or effect_id not in defn.status_effects:
                    problems.append(
                        f"ability {ability.id!r} applies {effect_id!r}, which "
                        f"{ability.element.value} does not define"
                    )

        if problems:
            raise ValueError("Invalid content tables:\n  " + "\n  ".join(problems))

    # ------------------------------------------------------------------
    # Element queries
    # ------------------------------------------------------------------

    def get_element(self, element: Element) -> ElementDefinition | None:
        """Return the :class:`ElementDefinition` for *element*, or ``None``."""
        return self.elements.get(element)

    def strong_against(self, element: Element) -> list[Element]:
        defn = self.elements.get(element)
        return list(defn.strong_against) if defn else []

    def weak_against(self, element: Element) -> list[Element]:
        defn = self.elements.get(element)
        return list(defn.weak_against) if defn else []

    def type_multiplier(self, attacker: Element, defender: Element) -> float:
        """Return the type-chart multiplier ``M(attacker, defender)``.

        Elements outside the combat cycle (and unknown elements) are
        neutral: ``1.0`` in both directions.
        """
        defn = self.elements.get(attacker)
        if defn is None:
            return 1.0
        if defender in defn.strong_against:
            return self.type_chart.strong_multiplier
        if defender in defn.weak_against:
            return self.type_chart.weak_multiplier
        return 1.0

    def element_color(self, element: Element | str) -> str:
        defn = self._lookup_element(element)
        return defn.color if defn else DEFAULT_COLOR

    def element_symbol(self, element: Element | str) -> str:
        defn = self._lookup_element(element)
        return defn.symbol if defn else DEFAULT_SYMBOL

    def _lookup_element(self, element: Element | str) -> ElementDefinition | None:
        try:
            return self.elements.get(Element(element))
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Ability queries
    # ------------------------------------------------------------------

    def get_ability(self, ability_id: str) -> AbilityDefinition | None:
        """Return the :class:`AbilityDefinition` for *ability_id*, or ``None``."""
        return self.abilities.get(ability_id)

    def basic_ability_for(self, element: Element) -> str | None:
        """Return the id of the basic ability granted to *element* units."""
        if self.combinations is None:
            return None
        return self.combinations.basic.get(element)

    # ------------------------------------------------------------------
    # Companion queries
    # ------------------------------------------------------------------

    def get_companion_profile(self, companion_type: str | None) -> CompanionProfile:
        """Return the profile for *companion_type*, falling back to the
        ``default`` entry (or a built-in default if the table lacks one)."""
        if companion_type and companion_type in self.companions:
            return self.companions[companion_type]
        return self.companions.get(DEFAULT_COMPANION_KEY, CompanionProfile())


@functools.lru_cache(maxsize=1)
def default_registry() -> ContentRegistry:
    """Return the process-wide registry loaded from the bundled tables."""
    logger.debug("Loading bundled content tables from %s", _DATA_DIR)
    return ContentRegistry().load_all()
