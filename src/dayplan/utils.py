"""Slot arithmetic helpers shared by the grid, the validator and logging."""

SLOTS_PER_DAY = 48
MINUTES_PER_SLOT = 30


def format_slot(slot: int) -> str:
    """Return a 12-hour clock label for a half-hour slot (0 -> "12:00 AM")."""
    hours, half = divmod(slot, 2)
    minutes = half * MINUTES_PER_SLOT
    period = "PM" if hours >= 12 else "AM"
    display_hours = 12 if hours % 12 == 0 else hours % 12
    return f"{display_hours}:{minutes:02d} {period}"


def is_strict_int(value: object) -> bool:
    """True for real ints; bool is rejected even though it subclasses int."""
    return isinstance(value, int) and not isinstance(value, bool)
