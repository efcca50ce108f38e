from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from easyranch.data_collection.constants import DEFAULT_ATTENTION_LIMIT, TEMPERATURE_THRESHOLDS
from easyranch.data_collection.models import Cow, HealthStatus

HEALTH_POINTS: Dict[HealthStatus, int] = {
    HealthStatus.CRITICAL: 100,
    HealthStatus.SICK: 80,
    HealthStatus.ATTENTION: 60,
    HealthStatus.HEALTHY: 0,
}

FEVER_TEMP_C = TEMPERATURE_THRESHOLDS['fever'][0]
ELEVATED_TEMP_C = 39.2
LOW_ACTIVITY = 20
HIGH_ACTIVITY = 90
OVERDUE_CHECKUP_DAYS = 7
DUE_CHECKUP_DAYS = 3


@dataclass(frozen=True)
class AttentionEntry:
    cow: Cow
    score: int


def days_since(moment: datetime, now: datetime) -> int:
    """Whole days elapsed, floored"""
    return int((now - moment).total_seconds() // 86400)


def calculate_attention_priority(cow: Cow, now: Optional[datetime] = None) -> int:
    """
    Additive attention score; every signal adds fixed points when it holds.
    """
    now = now or datetime.now()
    priority = HEALTH_POINTS[cow.health_status]

    temp = cow.vitals.temperature
    if temp > FEVER_TEMP_C:
        priority += 30
    elif temp > ELEVATED_TEMP_C:
        priority += 15

    activity = cow.behavior.activity
    if activity < LOW_ACTIVITY or activity > HIGH_ACTIVITY:
        priority += 20

    # Pregnancy-uncertainty bonus. The condition can never hold; it is kept
    # as written until the intended 40-60 band is confirmed.
    confidence = cow.pregnancy_status.confidence
    if confidence < 40 and confidence > 60:
        priority += 15

    checkup_days = days_since(cow.last_checkup, now)
    if checkup_days > OVERDUE_CHECKUP_DAYS:
        priority += 25
    elif checkup_days > DUE_CHECKUP_DAYS:
        priority += 10

    if len(cow.alerts) > 0:
        priority += 40

    return priority


def needs_attention(cow: Cow) -> bool:
    return cow.health_status is not HealthStatus.HEALTHY or len(cow.alerts) > 0


def rank_attention(cows: Iterable[Cow], k: int = DEFAULT_ATTENTION_LIMIT,
                   now: Optional[datetime] = None) -> List[AttentionEntry]:
    """
    Cows needing attention with their scores, highest first.

    The sort is stable, so equal scores keep herd order. At most k entries
    are returned.
    """
    if k <= 0:
        return []
    now = now or datetime.now()

    entries = [
        AttentionEntry(cow, calculate_attention_priority(cow, now))
        for cow in cows if needs_attention(cow)
    ]
    entries.sort(key=lambda entry: entry.score, reverse=True)
    return entries[:k]


def top_attention(cows: Iterable[Cow], k: int = DEFAULT_ATTENTION_LIMIT,
                  now: Optional[datetime] = None) -> List[Cow]:
    return [entry.cow for entry in rank_attention(cows, k, now)]
