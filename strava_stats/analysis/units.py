"""
Unit Conversions

Metric to imperial conversions used by every aggregate. Totals are
summed in raw units and converted once, so rounding happens after
summation.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

METERS_TO_MILES = 0.000621371
METERS_TO_FEET = 3.28084
SECONDS_TO_HOURS = 1.0 / 3600


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero (500.5 -> 501), unlike round()"""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def meters_to_miles(meters: Optional[float], ndigits: int = 1) -> float:
    return round_half_up((meters or 0) * METERS_TO_MILES, ndigits)


def meters_to_feet(meters: Optional[float]) -> int:
    return int(round_half_up((meters or 0) * METERS_TO_FEET))


def feet_to_meters(feet: Optional[float]) -> int:
    return int(round_half_up((feet or 0) / METERS_TO_FEET))


def seconds_to_hours(seconds: Optional[float], ndigits: int = 1) -> float:
    """
    Convert a duration to hours.

    Summary totals use 1 decimal, per-activity summaries use 2.
    """
    return round_half_up((seconds or 0) * SECONDS_TO_HOURS, ndigits)


def round_calories(calories: Optional[float]) -> int:
    return int(round_half_up(calories or 0))
