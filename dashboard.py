#!/usr/bin/env python3
"""
Flask JSON API serving the herd snapshot to the dashboard front end
"""

from dataclasses import replace
from datetime import datetime

from flask import Flask, jsonify, request

from easyranch.config_manager.manager import get_config_manager
from easyranch.custom_logging.structured_logger import StructuredLogger, setup_logging
from easyranch.data_collection.models import Snapshot
from easyranch.data_collection.simulator import SnapshotGenerator
from easyranch.data_validation.validator import validate_cow_data, validate_snapshot
from easyranch.scoring.attention import calculate_attention_priority, rank_attention
from easyranch.utils import filters
from easyranch.utils.config import Config
from easyranch.utils.helpers import classify_activity, classify_temperature, format_time_ago

app = Flask(__name__)


class BadRequest(Exception):
    pass


def _config() -> Config:
    if 'EASYRANCH_CONFIG' not in app.config:
        app.config['EASYRANCH_CONFIG'] = Config.from_manager(get_config_manager())
    return app.config['EASYRANCH_CONFIG']


def get_logger() -> StructuredLogger:
    """Structured logger configured from the logging section of the settings"""
    if 'EASYRANCH_LOGGER' not in app.config:
        config = _config()
        app.config['EASYRANCH_LOGGER'] = setup_logging(
            level=config.log_level,
            json_format=config.logging.get('json_format', False),
            file_enabled=config.logging.get('file_enabled', False),
            log_dir=config.logging.get('log_dir', 'logs'),
            separate_error_log=config.logging.get('separate_error_log', False),
        )
    return app.config['EASYRANCH_LOGGER']


def build_snapshot(seed=None) -> Snapshot:
    settings = _config().generator
    if seed is not None:
        settings = replace(settings, seed=seed)
    with get_logger().timer("generate_snapshot"):
        return SnapshotGenerator(settings).generate()


def get_snapshot() -> Snapshot:
    """Current snapshot, generated on first use"""
    if app.config.get('SNAPSHOT') is None:
        app.config['SNAPSHOT'] = build_snapshot()
    return app.config['SNAPSHOT']


def _list_arg(name):
    return [value for raw in request.args.getlist(name) for value in raw.split(',') if value]


def _int_arg(name, default):
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise BadRequest(f"Query parameter '{name}' must be an integer")


@app.errorhandler(BadRequest)
def handle_bad_request(error):
    return jsonify({'success': False, 'error': str(error)}), 400


@app.route('/api/kpis')
def get_kpis():
    return jsonify({'success': True, 'kpis': get_snapshot().kpi_metrics.to_dict()})


@app.route('/api/cows')
def get_cows():
    snapshot = get_snapshot()
    options = filters.FilterOptions(
        breeds=_list_arg('breed'),
        health_status=_list_arg('health'),
        pregnancy_status=_list_arg('pregnancy'),
        zones=_list_arg('zone'),
    )
    cows = filters.apply_all_filters(snapshot.animals, options)

    sort_key = request.args.get('sort')
    if sort_key:
        if sort_key not in filters.COW_SORTS:
            raise BadRequest(f"Unknown sort '{sort_key}', use one of {sorted(filters.COW_SORTS)}")
        ascending = request.args.get('order', 'asc') != 'desc'
        cows = filters.COW_SORTS[sort_key](cows, ascending)

    return jsonify({
        'success': True,
        'count': len(cows),
        'cows': [cow.to_dict() for cow in cows]
    })


@app.route('/api/cows/<cow_id>')
def get_cow(cow_id):
    snapshot = get_snapshot()
    cow = snapshot.cow_by_id(cow_id)
    if cow is None:
        return jsonify({'success': False, 'error': f"Cow {cow_id} not found"}), 404

    return jsonify({
        'success': True,
        'cow': cow.to_dict(),
        'attention_score': calculate_attention_priority(cow, snapshot.generated_at),
        'temperature_status': classify_temperature(cow.vitals.temperature),
        'activity_level': classify_activity(cow.behavior.activity),
        'alerts': [alert.to_dict() for alert in snapshot.alerts_for(cow_id)],
        'validation_errors': validate_cow_data(cow)
    })


@app.route('/api/alerts')
def get_alerts():
    alerts = get_snapshot().alerts
    alerts = filters.filter_alerts_by_priority(alerts, _list_arg('priority'))
    alerts = filters.filter_alerts_by_type(alerts, _list_arg('type'))

    resolved = request.args.get('resolved')
    if resolved is not None:
        alerts = filters.filter_alerts_by_resolution_status(alerts, resolved.lower() == 'true')

    alerts = filters.sort_alerts_by_timestamp(alerts)
    alerts = filters.sort_alerts_by_priority(alerts)

    return jsonify({
        'success': True,
        'count': len(alerts),
        'alerts': [alert.to_dict() for alert in alerts]
    })


@app.route('/api/activities')
def get_activities():
    activities = filters.filter_activities_by_type(get_snapshot().activities, _list_arg('type'))
    limit = _int_arg('limit', 100)

    return jsonify({
        'success': True,
        'count': len(activities),
        'activities': [activity.to_dict() for activity in activities[:max(limit, 0)]]
    })


@app.route('/api/trends/daily')
def get_daily_trends():
    trends = get_snapshot().daily_trends
    return jsonify({'success': True, 'trends': [trend.to_dict() for trend in trends]})


@app.route('/api/barn')
def get_barn_layout():
    snapshot = get_snapshot()
    positions = [
        {'cowId': cow.id, 'healthStatus': cow.health_status.value, **cow.location.to_dict()}
        for cow in snapshot.animals
    ]
    return jsonify({
        'success': True,
        'layout': snapshot.barn_layout.to_dict(),
        'cows': positions
    })


@app.route('/api/pregnancy/distribution')
def get_pregnancy_distribution():
    rows = get_snapshot().pregnancy_distribution
    return jsonify({'success': True, 'distribution': [row.to_dict() for row in rows]})


@app.route('/api/behavior/indicators')
def get_behavioral_indicators():
    rows = get_snapshot().behavioral_indicators
    return jsonify({'success': True, 'indicators': [row.to_dict() for row in rows]})


@app.route('/api/realtime')
def get_realtime_activity():
    snapshot = get_snapshot()
    items = []
    for item in snapshot.real_time_activity:
        data = item.to_dict()
        data['timeAgo'] = format_time_ago(item.timestamp, snapshot.generated_at)
        items.append(data)
    return jsonify({'success': True, 'activities': items})


@app.route('/api/attention')
def get_attention_list():
    snapshot = get_snapshot()
    limit = _int_arg('limit', _config().dashboard.attention_limit)
    entries = rank_attention(snapshot.animals, limit, snapshot.generated_at)

    return jsonify({
        'success': True,
        'count': len(entries),
        'cows': [
            {
                **entry.cow.to_dict(),
                'attentionScore': entry.score,
                'lastCheckupAgo': format_time_ago(entry.cow.last_checkup, snapshot.generated_at)
            }
            for entry in entries
        ]
    })


@app.route('/api/validation')
def get_validation_report():
    report = validate_snapshot(get_snapshot())
    return jsonify({'success': True, 'report': report.to_dict()})


@app.route('/api/refresh', methods=['POST'])
def refresh_snapshot():
    """Replace the snapshot wholesale"""
    payload = request.get_json(silent=True) or {}
    seed = payload.get('seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise BadRequest("seed must be a non-negative integer")

    app.config['SNAPSHOT'] = build_snapshot(seed)
    snapshot = app.config['SNAPSHOT']
    get_logger().info("Snapshot refreshed", cows=len(snapshot.animals), seed=seed)

    return jsonify({
        'success': True,
        'generated_at': snapshot.generated_at.isoformat(),
        'seed': snapshot.seed,
        'cows': len(snapshot.animals)
    })


@app.route('/api/status')
def get_status():
    snapshot = get_snapshot()
    return jsonify({
        'success': True,
        'generated_at': snapshot.generated_at.isoformat(),
        'age_seconds': (datetime.now() - snapshot.generated_at).total_seconds(),
        'seed': snapshot.seed
    })


if __name__ == '__main__':
    settings = _config().dashboard
    app.run(debug=settings.debug, host=settings.host, port=settings.port)
