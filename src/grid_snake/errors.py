"""Exception types raised by the simulation and match layers."""

from __future__ import annotations


class ContractViolation(RuntimeError):
    """An internal invariant was broken and the current match cannot go on.

    Raised for lookups that must always succeed (identifier to snake index,
    point to snake) and for placement on a full board. The match driver
    maps it to a forced termination of the offending match only.
    """
