"""
Export of snapshot tables to files
"""

from .exporter import DataExporter, snapshot_to_frames

__all__ = [
    'DataExporter',
    'snapshot_to_frames'
]
