"""
Default Values and Tolerances for Reactor Facility Modeling

This module contains the defaults used when a reactor configuration leaves
a parameter unset, the numeric tolerance applied to resource quantities,
and the names of the events a reactor records.
"""

from dataclasses import dataclass


# Resource quantity tolerance [kg]. Buffer capacity checks and whole-assembly
# arithmetic allow this much floating point slack.
EPS_RSRC: float = 1e-6

# Request preference used for every fuel type when none are configured
DEFAULT_PREFERENCE: float = 0.0

# Spent fuel storage is effectively unbounded unless configured
DEFAULT_N_ASSEM_SPENT: int = 1000000000

# No on-hand fresh fuel inventory: fuel is ordered just in time
DEFAULT_N_ASSEM_FRESH: int = 0


@dataclass(frozen=True)
class ReactorEvents:
    """Names of the events a reactor writes to its recording sink."""

    ENTER: str = "ENTER"
    CYCLE_START: str = "CYCLE_START"
    CYCLE_END: str = "CYCLE_END"
    DISCHARGE: str = "DISCHARGE"
    TRANSMUTE: str = "TRANSMUTE"
    LOAD: str = "LOAD"
    TRADE: str = "TRADE"
    DEMAND: str = "demand"


EVENTS = ReactorEvents()
