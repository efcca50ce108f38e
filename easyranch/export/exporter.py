"""
Snapshot exporter for CSV and JSON
"""

import json
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from easyranch.data_collection.models import Snapshot
from easyranch.scoring.attention import calculate_attention_priority

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('csv', 'json')


def snapshot_to_frames(snapshot: Snapshot) -> Dict[str, pd.DataFrame]:
    """
    Flatten a snapshot into one table per collection

    Returns:
        Dictionary of table name -> DataFrame (cows, alerts, activities,
        daily_trends, pregnancy_distribution)
    """
    now = snapshot.generated_at

    cows = pd.DataFrame([
        {
            'id': cow.id,
            'name': cow.name,
            'breed': cow.breed.value,
            'age_months': cow.age,
            'weight_kg': cow.weight,
            'health_status': cow.health_status.value,
            'is_pregnant': cow.pregnancy_status.is_pregnant,
            'pregnancy_confidence': cow.pregnancy_status.confidence,
            'expected_due_date': cow.pregnancy_status.expected_due_date,
            'zone': cow.location.zone.value,
            'x': cow.location.x,
            'y': cow.location.y,
            'temperature': cow.vitals.temperature,
            'heart_rate': cow.vitals.heart_rate,
            'rumination': cow.vitals.rumination,
            'steps_per_hour': cow.vitals.activity,
            'activity_score': cow.behavior.activity,
            'heat_score': cow.behavior.heat,
            'last_activity': cow.last_activity,
            'last_checkup': cow.last_checkup,
            'alert_count': len(cow.alerts),
            'attention_score': calculate_attention_priority(cow, now),
        }
        for cow in snapshot.animals
    ])

    alerts = pd.DataFrame([
        {
            'id': alert.id,
            'cow_id': alert.cow_id,
            'type': alert.type.value,
            'priority': alert.priority.value,
            'title': alert.title,
            'timestamp': alert.timestamp,
            'resolved': alert.resolved,
            'resolved_at': alert.resolved_at,
            'action_required': alert.action_required,
            'estimated_resolution_time': alert.estimated_resolution_time,
        }
        for alert in snapshot.alerts
    ])

    activities = pd.DataFrame([
        {
            'id': activity.id,
            'cow_id': activity.cow_id,
            'timestamp': activity.timestamp,
            'activity_type': activity.activity_type.value,
            'duration': activity.duration,
            'zone': activity.location.zone.value,
            'x': activity.location.x,
            'y': activity.location.y,
            'intensity': activity.intensity,
            'heart_rate': activity.heart_rate,
            'temperature': activity.temperature,
        }
        for activity in snapshot.activities
    ])

    trends = pd.DataFrame([
        {'date': trend.date, 'hour': trend.hour, **trend.metrics.to_dict()}
        for trend in snapshot.daily_trends
    ])

    distribution = pd.DataFrame([row.to_dict() for row in snapshot.pregnancy_distribution])

    return {
        'cows': cows,
        'alerts': alerts,
        'activities': activities,
        'daily_trends': trends,
        'pregnancy_distribution': distribution,
    }


class DataExporter:
    """Export snapshot tables in multiple formats (CSV, JSON)"""

    def __init__(self, output_dir: str = './outputs/exports'):
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

    def export_dataframe(self,
                         df: pd.DataFrame,
                         filename: str,
                         formats: Optional[List[str]] = None) -> Dict[str, str]:
        """
        Export dataframe to multiple formats

        Args:
            df: DataFrame to export
            filename: Base filename (without extension)
            formats: Subset of ['csv', 'json']

        Returns:
            Dictionary with format: filepath pairs
        """
        formats = list(formats or SUPPORTED_FORMATS)
        unknown = [fmt for fmt in formats if fmt not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported export format(s): {', '.join(unknown)}")

        if df.empty:
            logger.warning(f"Skipping export of empty table {filename}")
            return {}

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        base_filename = f"{filename}_{timestamp}"

        exported_files = {}
        for fmt in formats:
            if fmt == 'csv':
                exported_files['csv'] = self._export_to_csv(df, base_filename)
            elif fmt == 'json':
                exported_files['json'] = self._export_to_json(df, base_filename)

        logger.info(f"Exported {len(df)} {filename} records to {', '.join(exported_files)}")
        return exported_files

    def _export_to_csv(self, df: pd.DataFrame, base_filename: str) -> str:
        filepath = os.path.join(self.output_dir, f"{base_filename}.csv")
        df.to_csv(filepath, index=False, encoding='utf-8')
        logger.debug(f"Exported CSV to {filepath}")
        return filepath

    def _export_to_json(self, df: pd.DataFrame, base_filename: str) -> str:
        """Export dataframe records wrapped with export metadata"""
        filepath = os.path.join(self.output_dir, f"{base_filename}.json")

        export_data = {
            'metadata': {
                'export_date': datetime.now().isoformat(),
                'record_count': len(df),
                'columns': list(df.columns),
            },
            'data': json.loads(df.to_json(orient='records', date_format='iso'))
        }

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2, default=str)

        logger.debug(f"Exported JSON to {filepath}")
        return filepath

    def export_snapshot(self, snapshot: Snapshot,
                        formats: Optional[List[str]] = None) -> Dict[str, Dict[str, str]]:
        """
        Export every snapshot table

        Returns:
            Dictionary of table name -> {format: filepath}; empty tables are
            left out
        """
        results = {}
        for name, df in snapshot_to_frames(snapshot).items():
            files = self.export_dataframe(df, name, formats)
            if files:
                results[name] = files
        return results
