"""
Synthetic herd snapshot generator.

Stages run in a fixed forward order (animals, alerts, activities, aggregates)
and each stage only reads the output of earlier ones. All randomness comes
from a single numpy Generator, so a fixed seed and reference time reproduce
the same snapshot.
"""
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from easyranch.data_collection import constants
from easyranch.data_collection.models import (
    Activity, ActivityStatus, ActivityType, Alert, AlertPriority, AlertType,
    BarnLayout, BarnZone, BehavioralIndicator, BehaviorCategory, Behavior,
    Breed, Cow, DailyTrend, Equipment, EquipmentStatus, EquipmentType,
    FeedPriority, HealthStatus, KPIMetrics, Location, PregnancyDistribution,
    PregnancyStatus, RealTimeActivityItem, Snapshot, TrendMetrics, Vitals, Zone
)
from easyranch.utils.config import GeneratorSettings
from easyranch.utils.helpers import (
    calculate_average_activity, calculate_average_temperature,
    calculate_health_rate, calculate_pregnancy_rate, round_half_up
)

logger = logging.getLogger(__name__)

ALERT_TEMPLATES = (
    (AlertType.HEALTH, AlertPriority.HIGH, 'High Temperature Detected'),
    (AlertType.PREGNANCY, AlertPriority.MEDIUM, 'Pregnancy Status Change'),
    (AlertType.BEHAVIOR, AlertPriority.LOW, 'Abnormal Activity Pattern'),
    (AlertType.FEEDING, AlertPriority.MEDIUM, 'Low Feeding Activity'),
    (AlertType.LOCATION, AlertPriority.LOW, 'Extended Time in Medical Area'),
)

REALTIME_ACTIVITY_TYPES = (
    ActivityType.EATING,
    ActivityType.WALKING,
    ActivityType.RESTING,
    ActivityType.DRINKING,
    ActivityType.SOCIALIZING,
)

# (id, type, corners, capacity, occupancy range, temperature range)
BARN_ZONE_TEMPLATES = (
    ('feeding-1', Zone.FEEDING, ((5, 5), (30, 5), (30, 15), (5, 15)), 20, (8, 18), (15, 25)),
    ('resting-1', Zone.RESTING, ((35, 5), (70, 5), (70, 25), (35, 25)), 30, (15, 28), (18, 22)),
    ('milking-1', Zone.MILKING, ((75, 5), (95, 5), (95, 20), (75, 20)), 8, (2, 6), (16, 20)),
)

EQUIPMENT_LAYOUT = (
    ('camera-1', EquipmentType.CAMERA, (15, 45)),
    ('camera-2', EquipmentType.CAMERA, (50, 45)),
    ('camera-3', EquipmentType.CAMERA, (85, 45)),
    ('feeder-1', EquipmentType.FEEDER, (17, 10)),
    ('feeder-2', EquipmentType.FEEDER, (83, 30)),
    ('water-1', EquipmentType.WATER, (25, 35)),
    ('water-2', EquipmentType.WATER, (75, 35)),
)

BEHAVIOR_INDICATOR_KEYS = ('activity', 'movement', 'resting', 'social', 'feeding')

# Cosmetic period-over-period deltas: (low, high, decimals)
KPI_CHANGE_RANGES = {
    'totalCows': (-2, 3, 0),
    'healthyCows': (-3, 2, 0),
    'pregnantCows': (-1, 4, 0),
    'alertsCount': (-5, 3, 0),
    'averageActivity': (-8, 12, 0),
    'pregnancyRate': (-2.5, 3.2, 1),
    'healthRate': (-1.5, 2.8, 1),
    'averageTemperature': (-0.3, 0.4, 1),
}


def format_cow_id(index: int) -> str:
    """Sequential animal id for a zero-based index, e.g. 0 -> COW001"""
    return f"{constants.COW_ID_PREFIX}{str(index + 1).zfill(constants.ID_PAD_WIDTH)}"


def format_alert_id(index: int) -> str:
    return f"{constants.ALERT_ID_PREFIX}{str(index + 1).zfill(constants.ID_PAD_WIDTH)}"


class SnapshotGenerator:
    """Generates self-consistent synthetic herd snapshots"""

    def __init__(self, settings: Optional[GeneratorSettings] = None,
                 rng: Optional[np.random.Generator] = None):
        self.settings = settings or GeneratorSettings()
        self.rng = rng if rng is not None else np.random.default_rng(self.settings.seed)

    # Random primitives

    def random_number(self, low: float, high: float, decimals: int = 0):
        """
        Uniform draw in [low, high)

        Integer draws are floored; decimal draws are rounded to the
        requested number of places.
        """
        value = self.rng.random() * (high - low) + low
        if decimals > 0:
            return round_half_up(value, decimals)
        return int(np.floor(value))

    def random_element(self, items: Sequence):
        return items[int(self.rng.integers(len(items)))]

    def random_date(self, days_back: float, now: datetime) -> datetime:
        """A moment within the last days_back days, never after now"""
        return now - timedelta(days=self.rng.random() * days_back)

    # Stages

    def generate(self, reference_time: Optional[datetime] = None) -> Snapshot:
        """Generate one complete snapshot"""
        now = reference_time or datetime.now()
        settings = self.settings

        logger.info(
            f"Generating snapshot for {settings.population_size} cows "
            f"over {settings.day_window} days"
        )

        cows = self.generate_cows(settings.population_size, now)
        alerts, cows = self.generate_alerts(cows, now)
        activities = self.generate_activities(cows, settings.day_window, now)
        daily_trends = self.generate_daily_trends(len(cows), settings.day_window, now)
        barn_layout = self.generate_barn_layout()
        distribution = self.generate_pregnancy_distribution(cows)
        indicators = self.generate_behavioral_indicators(cows)
        kpis = self.generate_kpi_metrics(cows, alerts)
        realtime = self.generate_realtime_activity(cows, settings.realtime_count, now)

        logger.info(
            f"Snapshot generated: {len(cows)} cows, {len(alerts)} alerts, "
            f"{len(activities)} activities, {len(daily_trends)} trend buckets"
        )

        return Snapshot(
            generated_at=now,
            seed=settings.seed,
            animals=tuple(cows),
            alerts=tuple(alerts),
            activities=tuple(activities),
            daily_trends=tuple(daily_trends),
            barn_layout=barn_layout,
            pregnancy_distribution=tuple(distribution),
            behavioral_indicators=tuple(indicators),
            kpi_metrics=kpis,
            real_time_activity=tuple(realtime),
        )

    def generate_cows(self, count: int, now: datetime) -> List[Cow]:
        if count < 0:
            raise ValueError(f"Population size must be non-negative, got {count}")

        ranges = constants.GENERATION_RANGES
        behavior_ranges = constants.BEHAVIOR_RANGES
        width = constants.BARN_DIMENSIONS['width']
        height = constants.BARN_DIMENSIONS['height']
        cows = []

        for i in range(count):
            breed = Breed(self.random_element(constants.BREEDS))
            age = self.random_number(*ranges['age'])
            is_pregnant = bool(self.rng.random() < self.settings.pregnancy_rate)
            health_status = HealthStatus(self.random_element(constants.HEALTH_STATUS_WEIGHTS))

            if is_pregnant:
                confidence = self.random_number(*ranges['confidence_pregnant'])
            else:
                confidence = self.random_number(*ranges['confidence_open'])
            days_in_cycle = self.random_number(*ranges['days_in_cycle'])

            breeding_date = self.random_date(days_in_cycle, now) if is_pregnant else None
            expected_due_date = None
            if is_pregnant and breeding_date is not None:
                expected_due_date = breeding_date + timedelta(days=constants.GESTATION_PERIOD_DAYS)

            pregnancy = PregnancyStatus(
                is_pregnant=is_pregnant,
                confidence=confidence,
                days_in_cycle=days_in_cycle,
                breeding_date=breeding_date,
                expected_due_date=expected_due_date,
                gestation_days=days_in_cycle if is_pregnant else None,
            )

            location = Location(
                x=self.random_number(10, width - 10),
                y=self.random_number(10, height - 10),
                zone=Zone(self.random_element(constants.GENERATED_ZONES)),
            )

            vitals = Vitals(
                temperature=self.random_number(*ranges['temperature'], decimals=1),
                heart_rate=self.random_number(*ranges['heart_rate']),
                rumination=self.random_number(*ranges['rumination']),
                activity=self.random_number(*ranges['steps']),
            )

            heat_range = ranges['heat_pregnant'] if is_pregnant else ranges['heat_open']
            behavior = Behavior(
                activity=self.random_number(*behavior_ranges['activity']),
                movement=self.random_number(*behavior_ranges['movement']),
                resting=self.random_number(*behavior_ranges['resting']),
                social=self.random_number(*behavior_ranges['social']),
                feeding=self.random_number(*behavior_ranges['feeding']),
                vocalization=self.random_number(*behavior_ranges['vocalization']),
                heat=self.random_number(*heat_range),
            )

            cows.append(Cow(
                id=format_cow_id(i),
                name=f"{breed.value}-{i + 1}",
                breed=breed,
                age=age,
                weight=self.random_number(*ranges['weight']),
                health_status=health_status,
                pregnancy_status=pregnancy,
                location=location,
                last_activity=self.random_date(1, now),
                last_checkup=self.random_date(7, now),
                vitals=vitals,
                behavior=behavior,
            ))

        logger.debug(f"Generated {len(cows)} cows")
        return cows

    def generate_alerts(self, cows: Sequence[Cow], now: datetime) -> Tuple[List[Alert], List[Cow]]:
        """
        Attach one alert to each cow in the leading share of the herd

        Returns:
            The alerts and the herd with alert ids back-referenced
        """
        alert_count = round_half_up(len(cows) * self.settings.alert_coverage)
        alerts = []
        linked = list(cows)

        for index, cow in enumerate(cows[:alert_count]):
            alert_type, priority, title = self.random_element(ALERT_TEMPLATES)
            timestamp = self.random_date(2, now)
            resolved = bool(self.rng.random() < self.settings.alert_resolved_rate)
            estimated = self.random_number(15, 120)

            resolved_by = None
            resolved_at = None
            if resolved:
                resolved_by = 'System'
                resolved_at = min(timestamp + timedelta(minutes=self.random_number(30, 300)), now)

            alert = Alert(
                id=format_alert_id(index),
                cow_id=cow.id,
                type=alert_type,
                priority=priority,
                title=title,
                description=f"{title} for cow {cow.id} ({cow.breed.value})",
                timestamp=timestamp,
                resolved=resolved,
                action_required=priority is not AlertPriority.LOW,
                resolved_by=resolved_by,
                resolved_at=resolved_at,
                estimated_resolution_time=estimated,
            )
            alerts.append(alert)
            linked[index] = _with_alert(cow, alert.id)

        logger.debug(f"Generated {len(alerts)} alerts")
        return alerts, linked

    def generate_activities(self, cows: Sequence[Cow], days: int, now: datetime) -> List[Activity]:
        if days < 0:
            raise ValueError(f"Day window must be non-negative, got {days}")

        width = constants.BARN_DIMENSIONS['width']
        height = constants.BARN_DIMENSIONS['height']
        activity_types = list(ActivityType)
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        minutes_today = now.hour * 60 + now.minute + 1
        activities = []

        for cow in cows:
            for day in range(days):
                day_start = midnight - timedelta(days=day)
                minute_limit = minutes_today if day == 0 else 24 * 60

                for _ in range(self.random_number(8, 15)):
                    timestamp = day_start + timedelta(minutes=int(self.rng.integers(minute_limit)))
                    x = cow.location.x + self.random_number(-5, 5)
                    y = cow.location.y + self.random_number(-5, 5)

                    activities.append(Activity(
                        id=f"ACT{len(activities) + 1}",
                        cow_id=cow.id,
                        timestamp=timestamp,
                        activity_type=self.random_element(activity_types),
                        duration=self.random_number(15, 120),
                        location=Location(
                            x=min(max(x, 0), width),
                            y=min(max(y, 0), height),
                            zone=cow.location.zone,
                        ),
                        intensity=self.random_number(20, 90),
                        heart_rate=self.random_number(60, 85),
                        temperature=self.random_number(38.0, 39.5, decimals=1),
                    ))

        activities.sort(key=lambda a: a.timestamp, reverse=True)
        logger.debug(f"Generated {len(activities)} activities")
        return activities

    def generate_daily_trends(self, total_cows: int, days: int, now: datetime) -> List[DailyTrend]:
        """Hourly herd-level buckets for each day in the window, newest first"""
        if total_cows == 0:
            return []

        active_low = round_half_up(total_cows * 0.3)
        active_high = max(active_low + 1, round_half_up(total_cows * 0.9) + 1)
        trends = []

        for day in range(days):
            trend_date = (now - timedelta(days=day)).date()
            for hour in range(24):
                trends.append(DailyTrend(
                    date=trend_date,
                    hour=hour,
                    metrics=TrendMetrics(
                        average_activity=self.random_number(30, 80),
                        peak_activity=self.random_number(70, 100),
                        average_rumination=self.random_number(25, 40),
                        average_temperature=self.random_number(38.2, 39.3, decimals=1),
                        peak_temperature=self.random_number(39.0, 40.0, decimals=1),
                        cows_active=self.random_number(active_low, active_high),
                        total_cows=total_cows,
                    ),
                ))

        trends.sort(key=lambda t: (t.date, t.hour), reverse=True)
        return trends

    def generate_barn_layout(self) -> BarnLayout:
        zones = []
        for zone_id, zone_type, corners, capacity, occupancy, temperature in BARN_ZONE_TEMPLATES:
            zones.append(BarnZone(
                id=zone_id,
                type=zone_type,
                coordinates=corners,
                capacity=capacity,
                current_occupancy=self.random_number(*occupancy),
                temperature=self.random_number(*temperature, decimals=1),
            ))

        equipment = tuple(
            Equipment(id=eq_id, type=eq_type, position=position, status=EquipmentStatus.ACTIVE)
            for eq_id, eq_type, position in EQUIPMENT_LAYOUT
        )

        return BarnLayout(
            zones=tuple(zones),
            dimensions=dict(constants.BARN_DIMENSIONS),
            equipment=equipment,
        )

    def generate_pregnancy_distribution(self, cows: Sequence[Cow]) -> List[PregnancyDistribution]:
        """
        Per-breed pregnancy buckets

        pregnant: flagged and confidence above 70; notPregnant: not flagged
        and confidence below 30; everything else is uncertain.
        """
        if not cows:
            return []

        distribution = []
        for breed in Breed:
            breed_cows = [cow for cow in cows if cow.breed is breed]
            pregnant = sum(
                1 for cow in breed_cows
                if cow.pregnancy_status.is_pregnant and cow.pregnancy_status.confidence > 70
            )
            not_pregnant = sum(
                1 for cow in breed_cows
                if not cow.pregnancy_status.is_pregnant and cow.pregnancy_status.confidence < 30
            )
            average_confidence = 0
            if breed_cows:
                total = sum(cow.pregnancy_status.confidence for cow in breed_cows)
                average_confidence = round_half_up(total / len(breed_cows), 1)

            distribution.append(PregnancyDistribution(
                breed=breed,
                pregnant=pregnant,
                not_pregnant=not_pregnant,
                uncertain=len(breed_cows) - pregnant - not_pregnant,
                total=len(breed_cows),
                average_confidence=average_confidence,
            ))

        return distribution

    def generate_behavioral_indicators(self, cows: Sequence[Cow]) -> List[BehavioralIndicator]:
        if not cows:
            return []

        pregnant = [cow for cow in cows if cow.pregnancy_status.is_pregnant]
        open_cows = [cow for cow in cows if not cow.pregnancy_status.is_pregnant]

        return [
            BehavioralIndicator(BehaviorCategory.PREGNANT, _behavior_averages(pregnant)),
            BehavioralIndicator(BehaviorCategory.NON_PREGNANT, _behavior_averages(open_cows)),
        ]

    def generate_kpi_metrics(self, cows: Sequence[Cow], alerts: Sequence[Alert]) -> KPIMetrics:
        """Headline metrics; the changes block is random noise, not a comparison"""
        changes = {
            key: self.random_number(low, high, decimals)
            for key, (low, high, decimals) in KPI_CHANGE_RANGES.items()
        }

        return KPIMetrics(
            total_cows=len(cows),
            healthy_cows=sum(1 for cow in cows if cow.health_status is HealthStatus.HEALTHY),
            pregnant_cows=sum(1 for cow in cows if cow.pregnancy_status.is_pregnant),
            alerts_count=sum(1 for alert in alerts if not alert.resolved),
            average_activity=calculate_average_activity(cows),
            pregnancy_rate=calculate_pregnancy_rate(cows),
            health_rate=calculate_health_rate(cows),
            average_temperature=calculate_average_temperature(cows),
            changes=changes,
        )

    def generate_realtime_activity(self, cows: Sequence[Cow], count: int,
                                   now: datetime) -> List[RealTimeActivityItem]:
        if not cows:
            return []

        items = []
        for i in range(count):
            cow = self.random_element(cows)
            activity_type = self.random_element(REALTIME_ACTIVITY_TYPES)
            timestamp = now - timedelta(minutes=i * self.random_number(1, 30))
            status = ActivityStatus.ONGOING if self.rng.random() < 0.7 else ActivityStatus.COMPLETED

            items.append(RealTimeActivityItem(
                id=f"ACTIVITY{i + 1}",
                cow_id=cow.id,
                cow_name=cow.name or cow.id,
                activity_type=activity_type,
                timestamp=timestamp,
                status=status,
                duration=self.random_number(5, 45),
                location=cow.location.zone,
                priority=(FeedPriority.NORMAL if cow.health_status is HealthStatus.HEALTHY
                          else FeedPriority.ATTENTION),
            ))

        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items


def _with_alert(cow: Cow, alert_id: str) -> Cow:
    return replace(cow, alerts=cow.alerts + (alert_id,))


def _behavior_averages(cows: Sequence[Cow]) -> Dict[str, int]:
    if not cows:
        return {key: 0 for key in BEHAVIOR_INDICATOR_KEYS}
    return {
        key: round_half_up(sum(getattr(cow.behavior, key) for cow in cows) / len(cows))
        for key in BEHAVIOR_INDICATOR_KEYS
    }


def generate_snapshot(population_size: int = constants.DEFAULT_POPULATION_SIZE,
                      day_window: int = constants.DEFAULT_DAY_WINDOW,
                      seed: Optional[int] = None,
                      reference_time: Optional[datetime] = None,
                      **overrides) -> Snapshot:
    """
    Generate a snapshot in one call

    Args:
        population_size: Number of animals
        day_window: Days of activity history and hourly trends
        seed: Seed for the random source; None draws fresh entropy
        reference_time: Generation time, defaults to now
        **overrides: Other GeneratorSettings fields

    Returns:
        A new Snapshot
    """
    settings = GeneratorSettings(
        population_size=population_size,
        day_window=day_window,
        seed=seed,
        **overrides
    )
    return SnapshotGenerator(settings).generate(reference_time)
