"""Exceptions raised for programmer errors.

Gameplay problems (not enough energy, ability on cooldown, missed rolls)
never raise; they are reported through the battle log instead.
"""


class RumbleError(Exception):
    """Base class for all robo_rumble errors."""


class BattleStateError(RumbleError):
    """Operation not allowed in the battle's current lifecycle state."""


class UnknownUnitError(RumbleError, KeyError):
    """A unit id that is not part of either roster."""

    def __init__(self, unit_id: str) -> None:
        super().__init__(unit_id)
        self.unit_id = unit_id

    def __str__(self) -> str:
        return f"Unknown unit: {self.unit_id!r}"
