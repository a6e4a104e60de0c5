"""Status and field effect lifecycle -- attach, immunity, tick, cleanse.

Status effects live on ``UnitStatus.status_effects`` as an ordered list of
:class:`StatusEffect`; field effects live on ``BattleState.field_effects``.
Both lose one point of ``duration`` per tick and are dropped at zero.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from robo_rumble.defs import EffectPayload
from robo_rumble.sim.core.entities import StatusEffect
from robo_rumble.sim.core.game_state import EventType

from .damage import deal_damage

if TYPE_CHECKING:
    from robo_rumble.defs import Element, StatusEffectTemplate
    from robo_rumble.sim.core.entities import FieldEffect, Stats, UnitStatus
    from robo_rumble.sim.core.game_state import BattleState

logger = logging.getLogger(__name__)


def status_from_template(
    effect_id: str,
    template: StatusEffectTemplate,
    element: Element,
    source_id: str | None = None,
) -> StatusEffect:
    """Instantiate an element's on-hit status (e.g. ``shocked``)."""
    payload = EffectPayload.model_validate(
        template.model_dump(exclude={"name", "duration"})
    )
    return StatusEffect(
        id=effect_id,
        name=template.name,
        element=element,
        duration=template.duration,
        effect=payload,
        source_id=source_id,
    )


def is_debuff_immune(status: UnitStatus) -> bool:
    """True if any active effect grants debuff immunity or encryption."""
    return any(e.effect.blocks_debuffs for e in status.status_effects)


def has_effect(status: UnitStatus, effect_id: str) -> bool:
    return any(e.id == effect_id for e in status.status_effects)


def attach_status(
    battle: BattleState,
    target_id: str,
    effect: StatusEffect,
    *,
    debuff: bool = False,
) -> bool:
    """Attach *effect* to a unit and log it.

    Debuffs are refused (with a logged reason, no state change) when the
    target already carries a debuff-immunity or encryption effect.

    Returns
    -------
    bool
        Whether the effect was attached.
    """
    status = battle.get_status(target_id)
    target = battle.get_unit(target_id)
    if not status.is_alive:
        return False

    if debuff and is_debuff_immune(status):
        battle.log(
            EventType.DEBUFF,
            f"{target.name} is protected! {effect.name} has no effect.",
            source=effect.source_id,
            target=target_id,
            element=effect.element,
        )
        return False

    status.status_effects.append(effect)
    if effect.positive:
        text = f"{target.name} gains {effect.name}!"
    else:
        text = f"{target.name} is afflicted with {effect.name}!"
    battle.log(
        EventType.BUFF if effect.positive else EventType.DEBUFF,
        text,
        source=effect.source_id,
        target=target_id,
        value=effect.duration,
        element=effect.element,
    )
    return True


def cleanse(battle: BattleState, unit_id: str) -> int:
    """Strip every non-positive status effect from a unit.

    Returns the number of effects removed.
    """
    status = battle.get_status(unit_id)
    before = len(status.status_effects)
    status.status_effects = [e for e in status.status_effects if e.positive]
    removed = before - len(status.status_effects)
    battle.log(
        EventType.BUFF,
        f"{battle.get_unit(unit_id).name} was cleansed of {removed} effect(s).",
        target=unit_id,
        value=removed,
    )
    return removed


def effective_stats(battle: BattleState, unit_id: str) -> Stats:
    """The unit's stats with the ``stat_delta`` of every active status applied.

    Values are floored at 0.  Field effects do not change stats.
    """
    unit = battle.get_unit(unit_id)
    status = battle.get_status(unit_id)
    delta: dict[str, int] = {}
    for effect in status.status_effects:
        for stat, amount in effect.effect.stat_delta.items():
            delta[stat] = delta.get(stat, 0) + amount
    if not delta:
        return unit.stats
    return unit.stats.with_delta(delta)


def tick_status_effects(battle: BattleState) -> list[str]:
    """Process the status effects of every living unit.

    For each effect, in order: damage over time (may knock the unit out),
    the skip-turn roll, then the duration countdown.  Expired effects are
    removed.

    The skip-turn roll is only reported: paralyzed units still act.

    Returns
    -------
    list[str]
        Ids of units whose skip-turn roll succeeded this tick.
    """
    paralyzed: list[str] = []
    for unit in battle.living(battle.all_units):
        status = battle.unit_statuses[unit.id]
        kept: list[StatusEffect] = []
        for effect in status.status_effects:
            if status.is_alive and effect.effect.damage_per_turn > 0:
                deal_damage(
                    battle,
                    unit.id,
                    effect.effect.damage_per_turn,
                    source_id=effect.source_id,
                    element=effect.element,
                    description=(
                        f"{unit.name} takes {effect.effect.damage_per_turn} "
                        f"damage from {effect.name}!"
                    ),
                )
            if status.is_alive and effect.effect.skip_turn_chance > 0:
                if battle.rng.random_float() < effect.effect.skip_turn_chance:
                    paralyzed.append(unit.id)
                    battle.log(
                        EventType.DEBUFF,
                        f"{unit.name} is paralyzed by {effect.name}!",
                        target=unit.id,
                        element=effect.element,
                    )
            effect.duration -= 1
            if effect.duration > 0:
                kept.append(effect)
            else:
                logger.debug("%s wore off %s", effect.name, unit.id)
        status.status_effects = kept
        if battle.is_over:
            break
    return paralyzed


def add_field_effect(battle: BattleState, effect: FieldEffect) -> None:
    battle.field_effects.append(effect)
    battle.log(
        EventType.ELEMENT,
        f"{effect.name} spreads across the battlefield!",
        source=effect.source_id,
        value=effect.duration,
        element=effect.element,
    )


def tick_field_effects(battle: BattleState) -> None:
    """Count every field effect down by one tick and drop expired ones."""
    kept: list[FieldEffect] = []
    for effect in battle.field_effects:
        effect.duration -= 1
        if effect.duration > 0:
            kept.append(effect)
        else:
            battle.log(EventType.SYSTEM, f"{effect.name} fades away.", element=effect.element)
    battle.field_effects = kept
