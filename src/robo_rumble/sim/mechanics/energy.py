"""Energy system -- spend and regenerate.

Rules:
    - Every unit starts the battle with its full ``energy`` stat.
    - Using an ability spends its ``energy_cost``; a unit that cannot pay
      cannot use the ability.
    - The acting unit regenerates a flat amount at the end of its turn,
      capped at its maximum.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from robo_rumble.sim.core.entities import UnitStatus


def can_afford(status: UnitStatus, amount: int) -> bool:
    return status.current_energy >= amount


def spend_energy(status: UnitStatus, amount: int) -> bool:
    """Attempt to spend energy.  Returns False if insufficient.

    Parameters
    ----------
    status:
        Runtime record of the paying unit.
    amount:
        Energy cost to pay.

    Returns
    -------
    bool
        True if the energy was spent, False if the unit did not have
        enough (in which case nothing changes).
    """
    if status.current_energy < amount:
        return False
    status.current_energy -= amount
    return True


def regen_energy(status: UnitStatus, amount: int) -> int:
    """Restore up to *amount* energy, capped at ``max_energy``.

    Returns the energy actually gained.
    """
    if amount <= 0 or not status.is_alive:
        return 0
    gained = min(amount, status.max_energy - status.current_energy)
    status.current_energy += gained
    return gained
