"""Extraction of one reading per day from an hourly forecast series."""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from temperature_service.config import TARGET_HOUR
from temperature_service.weather.conditions import describe_condition
from temperature_service.weather.models import HourlySample, Reading

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def round_temperature(value: float) -> float:
    """Round a temperature to one decimal, half away from zero.

    The decimal representation of the float is rounded, so ``5.25`` becomes
    ``5.3`` and ``-5.25`` becomes ``-5.3``. The built-in ``round`` would give
    ``5.2`` (half to even).
    """
    rounded = float(Decimal(str(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))
    return rounded + 0.0  # no "-0.0"


def extract_daily_readings(
    samples: Iterable[HourlySample],
    target_hour: int = TARGET_HOUR
) -> List[Reading]:
    """Pick the sample nearest the target hour for every calendar day.

    Args:
        samples: Hourly samples in provider order
        target_hour: Hour of day to aim for

    Returns:
        Readings ordered by date, at most one per day
    """
    daily_samples = _group_by_date(samples)

    readings = []
    for day in sorted(daily_samples):
        best = _closest_to_target_hour(daily_samples[day], target_hour)
        readings.append(_create_reading(best))

    logger.debug(f"Extracted {len(readings)} daily readings")
    return readings


def _group_by_date(samples: Iterable[HourlySample]) -> Dict[date, List[HourlySample]]:
    """Group samples by the date component of their own timestamp."""
    daily_samples = defaultdict(list)
    for sample in samples:
        if sample.temperature is None:
            logger.debug(f"Skipping sample without temperature at {sample.timestamp}")
            continue
        daily_samples[sample.timestamp.date()].append(sample)
    return dict(daily_samples)


def _closest_to_target_hour(day_samples: List[HourlySample], target_hour: int) -> HourlySample:
    """Return the exact target-hour sample, or the nearest one.

    Ties go to the earliest timestamp; duplicate timestamps to the first occurrence.
    """
    target = timedelta(hours=target_hour)

    for sample in day_samples:
        if sample.timestamp.hour == target_hour and sample.timestamp.minute == 0:
            return sample

    def distance(sample: HourlySample) -> timedelta:
        return abs(timedelta(hours=sample.timestamp.hour, minutes=sample.timestamp.minute) - target)

    # min() keeps the first of equal keys
    return min(day_samples, key=lambda sample: (distance(sample), sample.timestamp))


def _create_reading(sample: HourlySample) -> Reading:
    return Reading(
        date=sample.timestamp.date(),
        time=sample.timestamp.strftime("%H:%M"),
        temperature=round_temperature(sample.temperature),
        description=describe_condition(sample.condition_code),
    )
