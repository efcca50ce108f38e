"""
Helper functions for the herd monitoring dashboard
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Sequence, Union

from easyranch.data_collection.constants import ACTIVITY_THRESHOLDS, TEMPERATURE_THRESHOLDS
from easyranch.data_collection.models import Cow, HealthStatus


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime
    label: str = ""

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def round_half_up(value: float, digits: int = 0) -> Union[int, float]:
    """
    Round a value half away from zero on its decimal representation

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        An int when digits is 0, otherwise a float
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    if digits == 0:
        return int(rounded)
    return float(rounded)


def calculate_average_temperature(cows: Sequence[Cow]) -> float:
    """Average body temperature, one decimal; 0 for an empty herd"""
    if not cows:
        return 0
    total = sum(cow.vitals.temperature for cow in cows)
    return round_half_up(total / len(cows), 1)


def calculate_average_activity(cows: Sequence[Cow]) -> int:
    """Average behavior activity score, nearest integer; 0 for an empty herd"""
    if not cows:
        return 0
    total = sum(cow.behavior.activity for cow in cows)
    return round_half_up(total / len(cows))


def calculate_pregnancy_rate(cows: Sequence[Cow]) -> float:
    """Share of pregnant animals as a percentage, one decimal"""
    if not cows:
        return 0
    pregnant_count = sum(1 for cow in cows if cow.pregnancy_status.is_pregnant)
    return round_half_up(pregnant_count / len(cows) * 100, 1)


def calculate_health_rate(cows: Sequence[Cow]) -> float:
    """Share of healthy animals as a percentage, one decimal"""
    if not cows:
        return 0
    healthy_count = sum(1 for cow in cows if cow.health_status is HealthStatus.HEALTHY)
    return round_half_up(healthy_count / len(cows) * 100, 1)


# Names used by the dashboard KPI cards
calculate_average_pregnancy_rate = calculate_pregnancy_rate
calculate_average_health_rate = calculate_health_rate


def format_duration(minutes: int) -> str:
    """
    Format a duration in minutes for display

    Examples:
        45 -> "45m", 120 -> "2h", 125 -> "2h 5m"
    """
    if minutes < 60:
        return f"{minutes}m"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}m" if remaining > 0 else f"{hours}h"


def format_temperature(celsius: float, unit: str = 'C') -> str:
    if unit == 'F':
        fahrenheit = celsius * 9 / 5 + 32
        return f"{round_half_up(fahrenheit, 1):.1f}°F"
    if unit != 'C':
        raise ValueError(f"Unsupported temperature unit: {unit}")
    return f"{round_half_up(celsius, 1):.1f}°C"


def _classify(value: float, bands: Dict[str, tuple]) -> str:
    for label, (low, high) in bands.items():
        if low <= value < high:
            return label
    lowest = min(bands.items(), key=lambda item: item[1][0])
    highest = max(bands.items(), key=lambda item: item[1][1])
    return lowest[0] if value < lowest[1][0] else highest[0]


def classify_temperature(celsius: float) -> str:
    """Temperature band: low, normal, fever or critical"""
    if celsius < TEMPERATURE_THRESHOLDS['normal'][0]:
        return 'low'
    return _classify(celsius, TEMPERATURE_THRESHOLDS)


def classify_activity(score: float) -> str:
    """Activity band: low, normal or high"""
    return _classify(score, ACTIVITY_THRESHOLDS)


def format_percentage_change(change: float) -> str:
    sign = '+' if change >= 0 else ''
    return f"{sign}{round_half_up(change, 1):.1f}%"


def format_time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """Relative age of a timestamp, e.g. "Just now" or "3h ago"."""
    now = now or datetime.now()
    hours = int((now - timestamp).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def get_time_range_label(start: datetime, end: datetime) -> str:
    days = int((end - start).total_seconds() // 86400)

    if days == 0:
        return 'Today'
    if days == 1:
        return 'Yesterday'
    if days <= 7:
        return 'Past Week'
    if days <= 30:
        return 'Past Month'
    if days <= 90:
        return 'Past Quarter'
    return 'Custom Range'


def get_date_ranges(now: Optional[datetime] = None) -> Dict[str, TimeRange]:
    """
    Standard reporting windows relative to now

    Returns:
        Dictionary keyed by today, yesterday, week, month and quarter
    """
    now = now or datetime.now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    one_day = timedelta(days=1)
    tick = timedelta(microseconds=1)

    return {
        'today': TimeRange(today, today + one_day - tick, 'Today'),
        'yesterday': TimeRange(today - one_day, today - tick, 'Yesterday'),
        'week': TimeRange(today - timedelta(days=7), now, 'Past 7 Days'),
        'month': TimeRange(today - timedelta(days=30), now, 'Past 30 Days'),
        'quarter': TimeRange(today - timedelta(days=90), now, 'Past 90 Days'),
    }
