from enum import Enum


class FlagColor(str, Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    UNFLAGGED = "unflagged"


UNFLAGGED = FlagColor.UNFLAGGED
NAMED_FLAG_COLORS = [flag for flag in FlagColor if flag is not UNFLAGGED]

_FLAG_LOOKUP = {flag.value: flag for flag in FlagColor}


def normalise_flag_color(flag_color: str | None) -> FlagColor:
    """Map a raw transaction flag onto FlagColor, unknown values become UNFLAGGED."""
    if not flag_color:
        return UNFLAGGED
    return _FLAG_LOOKUP.get(flag_color.lower(), UNFLAGGED)
