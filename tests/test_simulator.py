"""
Tests for the synthetic snapshot generator
"""
from datetime import timedelta

import numpy as np
import pytest

from easyranch.data_collection.constants import GESTATION_PERIOD_DAYS
from easyranch.data_collection.models import Breed, HealthStatus
from easyranch.data_collection.simulator import (
    SnapshotGenerator, format_alert_id, format_cow_id, generate_snapshot
)
from easyranch.utils.config import GeneratorSettings
from easyranch.utils.helpers import (
    calculate_average_activity, calculate_average_temperature,
    calculate_health_rate, calculate_pregnancy_rate
)


class TestIdentifiers:
    def test_cow_ids_are_zero_padded(self):
        assert format_cow_id(0) == "COW001"
        assert format_cow_id(41) == "COW042"
        assert format_cow_id(999) == "COW1000"

    def test_alert_ids(self):
        assert format_alert_id(0) == "ALERT001"
        assert format_alert_id(11) == "ALERT012"


class TestRandomPrimitives:
    def setup_method(self):
        self.generator = SnapshotGenerator(rng=np.random.default_rng(7))

    def test_integer_draws_stay_in_half_open_range(self):
        values = [self.generator.random_number(5, 10) for _ in range(500)]
        assert all(isinstance(v, int) for v in values)
        assert min(values) >= 5
        assert max(values) <= 9

    def test_decimal_draws_are_rounded(self):
        for _ in range(200):
            value = self.generator.random_number(38.0, 39.8, decimals=1)
            assert 38.0 <= value <= 39.8
            assert round(value, 1) == value

    def test_random_date_never_after_now(self, reference_time):
        for _ in range(100):
            moment = self.generator.random_date(7, reference_time)
            assert reference_time - timedelta(days=7) <= moment <= reference_time


class TestAnimals:
    def test_population_size_and_ids(self, snapshot):
        assert len(snapshot.animals) == 20
        assert [cow.id for cow in snapshot.animals] == [format_cow_id(i) for i in range(20)]

    def test_field_ranges(self, snapshot):
        for cow in snapshot.animals:
            assert 12 <= cow.age < 120
            assert 400 <= cow.weight < 700
            assert 38.0 <= cow.vitals.temperature <= 39.8
            assert 60 <= cow.vitals.heart_rate < 80
            assert 30 <= cow.behavior.activity < 90
            assert isinstance(cow.breed, Breed)
            assert cow.health_status is not HealthStatus.CRITICAL

            if cow.pregnancy_status.is_pregnant:
                assert 60 <= cow.pregnancy_status.confidence < 95
                assert 10 <= cow.behavior.heat < 30
            else:
                assert 5 <= cow.pregnancy_status.confidence < 40
                assert 20 <= cow.behavior.heat < 80

    def test_due_date_follows_breeding_date(self, snapshot):
        gestation = timedelta(days=GESTATION_PERIOD_DAYS)
        for cow in snapshot.animals:
            status = cow.pregnancy_status
            if status.is_pregnant:
                assert status.breeding_date is not None
                assert status.expected_due_date == status.breeding_date + gestation
            else:
                assert status.breeding_date is None
                assert status.expected_due_date is None

    def test_timestamps_not_after_generation(self, snapshot):
        for cow in snapshot.animals:
            assert cow.last_activity <= snapshot.generated_at
            assert cow.last_checkup <= snapshot.generated_at
            assert snapshot.generated_at - cow.last_checkup <= timedelta(days=7)


class TestAlerts:
    def test_alert_count_covers_leading_share(self, snapshot):
        assert len(snapshot.alerts) == 6
        assert [alert.cow_id for alert in snapshot.alerts] == [
            cow.id for cow in snapshot.animals[:6]
        ]

    def test_coverage_rounds_half_up(self, reference_time):
        snapshot = generate_snapshot(population_size=3, day_window=1, seed=1,
                                     reference_time=reference_time, alert_coverage=0.5)
        assert len(snapshot.alerts) == 2

    def test_alerts_and_cows_reference_each_other(self, snapshot):
        for alert in snapshot.alerts:
            assert alert.id in snapshot.cow_by_id(alert.cow_id).alerts
        for cow in snapshot.animals[6:]:
            assert cow.alerts == ()

    def test_resolution_after_raise(self, snapshot):
        for alert in snapshot.alerts:
            if alert.resolved:
                assert alert.resolved_by == 'System'
                assert alert.resolved_at >= alert.timestamp
            else:
                assert alert.resolved_at is None
            assert 15 <= alert.estimated_resolution_time < 120

    def test_resolutions_not_after_generation(self, reference_time):
        for seed in range(40):
            snapshot = generate_snapshot(population_size=20, day_window=1, seed=seed,
                                         reference_time=reference_time)
            for alert in snapshot.alerts:
                assert alert.timestamp <= snapshot.generated_at
                if alert.resolved_at is not None:
                    assert alert.timestamp <= alert.resolved_at <= snapshot.generated_at

    def test_low_priority_needs_no_action(self, snapshot):
        for alert in snapshot.alerts:
            assert alert.action_required == (alert.priority.value != 'low')


class TestActivities:
    def test_volume_per_cow_and_day(self, snapshot):
        assert 20 * 3 * 8 <= len(snapshot.activities) <= 20 * 3 * 14

    def test_newest_first_and_not_in_future(self, snapshot):
        timestamps = [a.timestamp for a in snapshot.activities]
        assert timestamps == sorted(timestamps, reverse=True)
        assert timestamps[0] <= snapshot.generated_at

    def test_inside_barn_and_cow_zone(self, snapshot):
        for activity in snapshot.activities:
            cow = snapshot.cow_by_id(activity.cow_id)
            assert activity.location.zone is cow.location.zone
            assert 0 <= activity.location.x <= 100
            assert 0 <= activity.location.y <= 60

    def test_zero_day_window(self, reference_time):
        snapshot = generate_snapshot(population_size=5, day_window=0, seed=3,
                                     reference_time=reference_time)
        assert snapshot.activities == ()
        assert snapshot.daily_trends == ()


class TestAggregates:
    def test_daily_trends(self, snapshot):
        assert len(snapshot.daily_trends) == 24 * 3
        keys = [(t.date, t.hour) for t in snapshot.daily_trends]
        assert keys == sorted(keys, reverse=True)
        assert keys[0] == (snapshot.generated_at.date(), 23)
        for trend in snapshot.daily_trends:
            assert trend.metrics.total_cows == 20
            assert 6 <= trend.metrics.cows_active <= 18

    def test_kpis_match_helpers(self, snapshot):
        kpis = snapshot.kpi_metrics
        cows = snapshot.animals

        assert kpis.total_cows == 20
        assert kpis.healthy_cows == sum(1 for c in cows if c.health_status is HealthStatus.HEALTHY)
        assert kpis.pregnant_cows == sum(1 for c in cows if c.pregnancy_status.is_pregnant)
        assert kpis.alerts_count == sum(1 for a in snapshot.alerts if not a.resolved)
        assert kpis.average_activity == calculate_average_activity(cows)
        assert kpis.pregnancy_rate == calculate_pregnancy_rate(cows)
        assert kpis.health_rate == calculate_health_rate(cows)
        assert kpis.average_temperature == calculate_average_temperature(cows)
        assert set(kpis.changes) == {
            'totalCows', 'healthyCows', 'pregnantCows', 'alertsCount',
            'averageActivity', 'pregnancyRate', 'healthRate', 'averageTemperature'
        }

    def test_pregnancy_distribution_partitions_herd(self, snapshot):
        rows = snapshot.pregnancy_distribution
        assert [row.breed for row in rows] == list(Breed)
        assert sum(row.total for row in rows) == 20
        for row in rows:
            assert row.pregnant + row.not_pregnant + row.uncertain == row.total

    def test_behavioral_indicators(self, snapshot):
        categories = [row.category.value for row in snapshot.behavioral_indicators]
        assert categories == ['pregnant', 'nonPregnant']
        for row in snapshot.behavioral_indicators:
            assert set(row.metrics) == {'activity', 'movement', 'resting', 'social', 'feeding'}

    def test_barn_layout(self, snapshot):
        layout = snapshot.barn_layout
        assert [zone.id for zone in layout.zones] == ['feeding-1', 'resting-1', 'milking-1']
        assert len(layout.equipment) == 7
        assert layout.dimensions['width'] == 100
        for zone in layout.zones:
            assert 0 <= zone.current_occupancy <= zone.capacity

    def test_realtime_feed(self, snapshot):
        feed = snapshot.real_time_activity
        assert len(feed) == 20
        timestamps = [item.timestamp for item in feed]
        assert timestamps == sorted(timestamps, reverse=True)
        ids = {cow.id for cow in snapshot.animals}
        assert all(item.cow_id in ids for item in feed)


class TestSnapshot:
    def test_same_seed_is_reproducible(self, reference_time):
        first = generate_snapshot(population_size=10, day_window=2, seed=99,
                                  reference_time=reference_time)
        second = generate_snapshot(population_size=10, day_window=2, seed=99,
                                   reference_time=reference_time)
        assert first.to_dict() == second.to_dict()
        assert first.seed == 99

    def test_different_seeds_differ(self, reference_time):
        first = generate_snapshot(population_size=10, seed=1, reference_time=reference_time)
        second = generate_snapshot(population_size=10, seed=2, reference_time=reference_time)
        assert first.to_dict()['animals'] != second.to_dict()['animals']

    def test_empty_population(self, reference_time):
        snapshot = generate_snapshot(population_size=0, day_window=7, seed=5,
                                     reference_time=reference_time)
        assert snapshot.animals == ()
        assert snapshot.alerts == ()
        assert snapshot.activities == ()
        assert snapshot.daily_trends == ()
        assert snapshot.pregnancy_distribution == ()
        assert snapshot.behavioral_indicators == ()
        assert snapshot.real_time_activity == ()
        assert snapshot.kpi_metrics.total_cows == 0
        assert snapshot.kpi_metrics.average_temperature == 0
        assert len(snapshot.barn_layout.zones) == 3

    def test_negative_population_rejected(self):
        with pytest.raises(ValueError):
            GeneratorSettings(population_size=-1)

    def test_probability_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            GeneratorSettings(pregnancy_rate=1.5)

    def test_lookups(self, snapshot):
        assert snapshot.cow_by_id("COW003").id == "COW003"
        assert snapshot.cow_by_id("COW999") is None
        assert [a.cow_id for a in snapshot.alerts_for("COW001")] == ["COW001"]

    def test_to_dict_uses_camel_case(self, snapshot):
        data = snapshot.to_dict()
        assert data['generatedAt'] == snapshot.generated_at.isoformat()
        cow = data['animals'][0]
        assert 'healthStatus' in cow
        assert 'isPregnant' in cow['pregnancyStatus']
        assert 'heartRate' in cow['vitals']
