"""
Synthetic herd data: record types, domain constants and the snapshot generator
"""

from .models import (
    Activity,
    Alert,
    Cow,
    HealthStatus,
    Snapshot
)

__all__ = [
    'Activity',
    'Alert',
    'Cow',
    'HealthStatus',
    'Snapshot'
]
