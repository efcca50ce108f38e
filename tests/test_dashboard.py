"""
Tests for the dashboard JSON API
"""
import json

import pytest

import dashboard
from easyranch.custom_logging.structured_logger import reset_structured_logger
from easyranch.data_collection.simulator import generate_snapshot
from easyranch.data_validation.validator import reset_data_validator
from easyranch.utils.config import Config
from easyranch.utils.helpers import classify_activity, classify_temperature


@pytest.fixture
def client(snapshot):
    dashboard.app.config['TESTING'] = True
    dashboard.app.config['EASYRANCH_CONFIG'] = Config({
        'generator': {'population_size': 12, 'day_window': 2},
        'dashboard': {'attention_limit': 4},
    })
    dashboard.app.config['SNAPSHOT'] = snapshot
    reset_data_validator()
    dashboard.app.config.pop('EASYRANCH_LOGGER', None)
    with dashboard.app.test_client() as client:
        yield client
    dashboard.app.config.pop('SNAPSHOT', None)
    dashboard.app.config.pop('EASYRANCH_CONFIG', None)
    logger = dashboard.app.config.pop('EASYRANCH_LOGGER', None)
    if logger is not None:
        for handler in logger.logger.handlers:
            handler.close()
    reset_structured_logger()


class TestReadEndpoints:
    def test_kpis(self, client, snapshot):
        data = client.get('/api/kpis').get_json()

        assert data['success'] is True
        assert data['kpis']['totalCows'] == 20
        assert data['kpis']['pregnancyRate'] == snapshot.kpi_metrics.pregnancy_rate

    def test_cows(self, client):
        data = client.get('/api/cows').get_json()
        assert data['count'] == 20
        assert data['cows'][0]['id'] == 'COW001'

    def test_cows_filtered_and_sorted(self, client, snapshot):
        data = client.get('/api/cows?health=sick,attention&sort=age&order=desc').get_json()

        expected = [c for c in snapshot.animals if c.health_status.value in ('sick', 'attention')]
        assert data['count'] == len(expected)
        ages = [cow['age'] for cow in data['cows']]
        assert ages == sorted(ages, reverse=True)

    def test_unknown_sort(self, client):
        response = client.get('/api/cows?sort=colour')
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_single_cow(self, client, snapshot):
        data = client.get('/api/cows/COW001').get_json()

        assert data['cow']['id'] == 'COW001'
        assert [a['id'] for a in data['alerts']] == [snapshot.alerts[0].id]
        assert data['validation_errors'] == []
        assert data['attention_score'] >= 40
        assert data['temperature_status'] == classify_temperature(snapshot.animals[0].vitals.temperature)
        assert data['activity_level'] == classify_activity(snapshot.animals[0].behavior.activity)

    def test_missing_cow(self, client):
        response = client.get('/api/cows/COW999')
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Cow COW999 not found'}

    def test_alerts_filtered(self, client, snapshot):
        data = client.get('/api/alerts?resolved=false').get_json()
        assert data['count'] == sum(1 for a in snapshot.alerts if not a.resolved)
        assert all(not alert['resolved'] for alert in data['alerts'])

    def test_activities_limit(self, client):
        data = client.get('/api/activities?limit=10').get_json()
        assert len(data['activities']) == 10
        assert data['count'] > 10

    def test_activities_bad_limit(self, client):
        assert client.get('/api/activities?limit=ten').status_code == 400

    def test_trends_and_aggregates(self, client):
        assert len(client.get('/api/trends/daily').get_json()['trends']) == 72
        assert len(client.get('/api/pregnancy/distribution').get_json()['distribution']) == 5
        assert len(client.get('/api/behavior/indicators').get_json()['indicators']) == 2

    def test_barn(self, client):
        data = client.get('/api/barn').get_json()
        assert len(data['layout']['zones']) == 3
        assert len(data['cows']) == 20
        assert {'cowId', 'x', 'y', 'zone', 'healthStatus'} <= set(data['cows'][0])

    def test_realtime(self, client):
        items = client.get('/api/realtime').get_json()['activities']
        assert len(items) == 20
        assert items[0]['timeAgo'] == 'Just now'


class TestAttentionEndpoint:
    def test_uses_configured_limit(self, client):
        data = client.get('/api/attention').get_json()

        assert data['count'] <= 4
        scores = [cow['attentionScore'] for cow in data['cows']]
        assert scores == sorted(scores, reverse=True)

    def test_explicit_limit(self, client):
        data = client.get('/api/attention?limit=1').get_json()
        assert data['count'] == 1

    def test_zero_limit(self, client):
        assert client.get('/api/attention?limit=0').get_json()['cows'] == []


class TestSnapshotLifecycle:
    def test_validation_report(self, client):
        report = client.get('/api/validation').get_json()['report']
        assert report['is_valid'] is True
        assert report['rules_checked'] == 7

    def test_refresh_with_seed(self, client):
        first = client.post('/api/refresh', json={'seed': 5}).get_json()
        assert first['seed'] == 5
        assert first['cows'] == 12
        cows_first = client.get('/api/cows').get_json()['cows']

        client.post('/api/refresh', json={'seed': 5})
        cows_second = client.get('/api/cows').get_json()['cows']

        assert [c['breed'] for c in cows_first] == [c['breed'] for c in cows_second]
        assert [c['weight'] for c in cows_first] == [c['weight'] for c in cows_second]

    def test_refresh_rejects_bad_seed(self, client):
        response = client.post('/api/refresh', json={'seed': 'abc'})
        assert response.status_code == 400

    def test_refresh_rejects_boolean_seed(self, client):
        response = client.post('/api/refresh', json={'seed': True})
        assert response.status_code == 400
        assert response.get_json()['success'] is False
        assert dashboard.app.config['SNAPSHOT'].seed == 42

    def test_logging_follows_settings(self, client, tmp_path):
        dashboard.app.config['EASYRANCH_CONFIG'] = Config({
            'generator': {'population_size': 3, 'day_window': 1},
            'logging': {'json_format': True, 'file_enabled': True, 'log_dir': str(tmp_path)},
        })

        client.post('/api/refresh', json={'seed': 8})
        dashboard.get_logger().flush()

        records = [json.loads(line) for line in (tmp_path / "easyranch.log").read_text().splitlines()]
        refreshed = [r for r in records if r['message'] == "Snapshot refreshed"]
        assert refreshed[0]['extra'] == {'cows': 3, 'seed': 8}

    def test_status(self, client, snapshot):
        data = client.get('/api/status').get_json()
        assert data['seed'] == 42
        assert data['generated_at'] == snapshot.generated_at.isoformat()

    def test_lazily_generates_snapshot(self, client):
        dashboard.app.config['SNAPSHOT'] = None
        data = client.get('/api/kpis').get_json()
        assert data['kpis']['totalCows'] == 12

    def test_empty_herd(self, client, reference_time):
        dashboard.app.config['SNAPSHOT'] = generate_snapshot(
            population_size=0, seed=1, reference_time=reference_time
        )
        assert client.get('/api/cows').get_json()['count'] == 0
        assert client.get('/api/attention').get_json()['cows'] == []
        assert client.get('/api/kpis').get_json()['kpis']['averageTemperature'] == 0
