"""
Filtering, sorting and grouping over snapshot collections.

Every function returns a new list and leaves its input untouched. Selector
lists accept enum members or their string values; an empty selector list
means no filtering on that dimension.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set

from easyranch.data_collection.models import (
    Activity, Alert, Cow, PregnancyCategory
)
from easyranch.utils.helpers import TimeRange


@dataclass
class FilterOptions:
    breeds: List = field(default_factory=list)
    health_status: List = field(default_factory=list)
    pregnancy_status: List = field(default_factory=list)
    zones: List = field(default_factory=list)
    date_range: Optional[TimeRange] = None


def _values(selectors: Iterable) -> Set[str]:
    return {s.value if isinstance(s, Enum) else str(s) for s in selectors}


def filter_cows_by_health_status(cows: Sequence[Cow], statuses: Iterable) -> List[Cow]:
    wanted = _values(statuses)
    if not wanted:
        return list(cows)
    return [cow for cow in cows if cow.health_status.value in wanted]


def filter_cows_by_breed(cows: Sequence[Cow], breeds: Iterable) -> List[Cow]:
    wanted = _values(breeds)
    if not wanted:
        return list(cows)
    return [cow for cow in cows if cow.breed.value in wanted]


def filter_cows_by_pregnancy_status(cows: Sequence[Cow], statuses: Iterable) -> List[Cow]:
    """
    Keep cows matching any selected pregnancy bucket.

    pregnant and notPregnant follow the pregnancy flag; uncertain matches a
    confidence strictly between 30 and 70 regardless of the flag.
    """
    wanted = _values(statuses)
    if not wanted:
        return list(cows)

    def matches(cow: Cow) -> bool:
        status = cow.pregnancy_status
        if PregnancyCategory.PREGNANT.value in wanted and status.is_pregnant:
            return True
        if PregnancyCategory.NOT_PREGNANT.value in wanted and not status.is_pregnant:
            return True
        if PregnancyCategory.UNCERTAIN.value in wanted and 30 < status.confidence < 70:
            return True
        return False

    return [cow for cow in cows if matches(cow)]


def filter_cows_by_zone(cows: Sequence[Cow], zones: Iterable) -> List[Cow]:
    wanted = _values(zones)
    if not wanted:
        return list(cows)
    return [cow for cow in cows if cow.location.zone.value in wanted]


def filter_cows_by_date_range(cows: Sequence[Cow], date_range: TimeRange) -> List[Cow]:
    return [cow for cow in cows if date_range.contains(cow.last_activity)]


def apply_all_filters(cows: Sequence[Cow], filters: FilterOptions) -> List[Cow]:
    filtered = list(cows)
    filtered = filter_cows_by_breed(filtered, filters.breeds)
    filtered = filter_cows_by_health_status(filtered, filters.health_status)
    filtered = filter_cows_by_pregnancy_status(filtered, filters.pregnancy_status)
    filtered = filter_cows_by_zone(filtered, filters.zones)
    if filters.date_range is not None:
        filtered = filter_cows_by_date_range(filtered, filters.date_range)
    return filtered


# Sorting

def sort_cows_by_id(cows: Sequence[Cow], ascending: bool = True) -> List[Cow]:
    return sorted(cows, key=lambda cow: cow.id, reverse=not ascending)


def sort_cows_by_age(cows: Sequence[Cow], ascending: bool = True) -> List[Cow]:
    return sorted(cows, key=lambda cow: cow.age, reverse=not ascending)


def sort_cows_by_health_status(cows: Sequence[Cow], ascending: bool = True) -> List[Cow]:
    """Ascending order puts critical animals first"""
    return sorted(cows, key=lambda cow: -cow.health_status.severity, reverse=not ascending)


def sort_cows_by_pregnancy_confidence(cows: Sequence[Cow], ascending: bool = True) -> List[Cow]:
    return sorted(cows, key=lambda cow: cow.pregnancy_status.confidence, reverse=not ascending)


def sort_cows_by_last_activity(cows: Sequence[Cow], ascending: bool = True) -> List[Cow]:
    return sorted(cows, key=lambda cow: cow.last_activity, reverse=not ascending)


COW_SORTS = {
    'id': sort_cows_by_id,
    'age': sort_cows_by_age,
    'health': sort_cows_by_health_status,
    'confidence': sort_cows_by_pregnancy_confidence,
    'last_activity': sort_cows_by_last_activity,
}


# Alerts

def filter_alerts_by_priority(alerts: Sequence[Alert], priorities: Iterable) -> List[Alert]:
    wanted = _values(priorities)
    if not wanted:
        return list(alerts)
    return [alert for alert in alerts if alert.priority.value in wanted]


def filter_alerts_by_type(alerts: Sequence[Alert], types: Iterable) -> List[Alert]:
    wanted = _values(types)
    if not wanted:
        return list(alerts)
    return [alert for alert in alerts if alert.type.value in wanted]


def filter_alerts_by_resolution_status(alerts: Sequence[Alert], resolved: bool) -> List[Alert]:
    return [alert for alert in alerts if alert.resolved == resolved]


def sort_alerts_by_priority(alerts: Sequence[Alert], ascending: bool = False) -> List[Alert]:
    """Default (descending) order puts critical alerts first"""
    return sorted(alerts, key=lambda alert: alert.priority.rank, reverse=not ascending)


def sort_alerts_by_timestamp(alerts: Sequence[Alert], ascending: bool = False) -> List[Alert]:
    """Default order is newest first"""
    return sorted(alerts, key=lambda alert: alert.timestamp, reverse=not ascending)


# Activities

def filter_activities_by_type(activities: Sequence[Activity], types: Iterable) -> List[Activity]:
    wanted = _values(types)
    if not wanted:
        return list(activities)
    return [a for a in activities if a.activity_type.value in wanted]


def filter_activities_by_date_range(activities: Sequence[Activity],
                                    date_range: TimeRange) -> List[Activity]:
    return [a for a in activities if date_range.contains(a.timestamp)]


def group_activities_by_hour(activities: Sequence[Activity]) -> Dict[int, List[Activity]]:
    groups: Dict[int, List[Activity]] = OrderedDict()
    for activity in activities:
        groups.setdefault(activity.timestamp.hour, []).append(activity)
    return groups


def group_activities_by_day(activities: Sequence[Activity]) -> Dict[date, List[Activity]]:
    groups: Dict[date, List[Activity]] = OrderedDict()
    for activity in activities:
        groups.setdefault(activity.timestamp.date(), []).append(activity)
    return groups
