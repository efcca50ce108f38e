"""
Shared fixtures for the easyranch test suite
"""
from datetime import datetime, timedelta

import pytest

from easyranch.data_collection.models import (
    Behavior, Breed, Cow, HealthStatus, Location, PregnancyStatus, Vitals, Zone
)
from easyranch.data_collection.simulator import generate_snapshot

REFERENCE_TIME = datetime(2024, 3, 15, 14, 30, 0)


def build_cow(cow_id="COW001", now=REFERENCE_TIME, breed=Breed.HOLSTEIN,
              health=HealthStatus.HEALTHY, temperature=38.6, activity=50,
              confidence=20, is_pregnant=False, checkup_days=0.5, alerts=(),
              age=48, weight=550, zone=Zone.FEEDING, last_activity_hours=2):
    """Cow record with neutral defaults; every scoring signal is off unless overridden"""
    breeding_date = now - timedelta(days=30) if is_pregnant else None
    return Cow(
        id=cow_id,
        breed=breed,
        age=age,
        weight=weight,
        health_status=health,
        pregnancy_status=PregnancyStatus(
            is_pregnant=is_pregnant,
            confidence=confidence,
            days_in_cycle=30 if is_pregnant else 10,
            breeding_date=breeding_date,
            expected_due_date=breeding_date + timedelta(days=283) if breeding_date else None,
            gestation_days=30 if is_pregnant else None,
        ),
        location=Location(x=20, y=20, zone=zone),
        last_activity=now - timedelta(hours=last_activity_hours),
        last_checkup=now - timedelta(days=checkup_days),
        vitals=Vitals(temperature=temperature, heart_rate=70, rumination=30, activity=200),
        behavior=Behavior(activity=activity, movement=50, resting=60, social=40,
                          feeding=70, vocalization=30, heat=20),
        name=f"{breed.value}-{cow_id}",
        alerts=tuple(alerts),
    )


@pytest.fixture
def reference_time():
    return REFERENCE_TIME


@pytest.fixture
def cow_factory():
    return build_cow


@pytest.fixture
def snapshot():
    """Deterministic mid-sized snapshot"""
    return generate_snapshot(population_size=20, day_window=3, seed=42,
                             reference_time=REFERENCE_TIME)
