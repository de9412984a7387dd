"""
Slot scheduling module.

Calendar expansion: scheduling spec -> candidate start times (pure)
Materialization: candidates -> slot rows (batched insert)
Store: listing with filters and staff maintenance
"""

from .config import SchedulingConfig, get_scheduling_config
from .calendar import CandidateSlot, ScheduleSpec, TimeWindow, expand_schedule
from .materializer import generate_slots, materialize_slots
from .store import (
    clear_past_slots,
    create_slot,
    delete_slots,
    get_slot,
    list_slots,
    update_slot,
)

__all__ = [
    "SchedulingConfig",
    "get_scheduling_config",
    "CandidateSlot",
    "ScheduleSpec",
    "TimeWindow",
    "expand_schedule",
    "generate_slots",
    "materialize_slots",
    "list_slots",
    "get_slot",
    "create_slot",
    "update_slot",
    "delete_slots",
    "clear_past_slots",
]
