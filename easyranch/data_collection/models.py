"""
Record types for the synthetic herd snapshot
"""
from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Breed(Enum):
    """Supported cattle breeds"""
    HOLSTEIN = "Holstein"
    JERSEY = "Jersey"
    ANGUS = "Angus"
    HEREFORD = "Hereford"
    SIMMENTAL = "Simmental"


class HealthStatus(Enum):
    """Health status, ordered by severity"""
    HEALTHY = "healthy"
    ATTENTION = "attention"
    SICK = "sick"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _HEALTH_SEVERITY[self]


_HEALTH_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.ATTENTION: 1,
    HealthStatus.SICK: 2,
    HealthStatus.CRITICAL: 3,
}


class Zone(Enum):
    """Named sub-areas of the barn"""
    FEEDING = "feeding"
    RESTING = "resting"
    WALKWAY = "walkway"
    MILKING = "milking"
    MEDICAL = "medical"


class AlertType(Enum):
    HEALTH = "health"
    PREGNANCY = "pregnancy"
    BEHAVIOR = "behavior"
    LOCATION = "location"
    FEEDING = "feeding"
    TEMPERATURE = "temperature"


class AlertPriority(Enum):
    """Alert priority, ordered by urgency"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    AlertPriority.LOW: 0,
    AlertPriority.MEDIUM: 1,
    AlertPriority.HIGH: 2,
    AlertPriority.CRITICAL: 3,
}


class ActivityType(Enum):
    EATING = "eating"
    RESTING = "resting"
    WALKING = "walking"
    DRINKING = "drinking"
    SOCIALIZING = "socializing"
    RUMINATING = "ruminating"


class PregnancyCategory(Enum):
    """Buckets used by the per-breed pregnancy distribution and cow filters"""
    PREGNANT = "pregnant"
    NOT_PREGNANT = "notPregnant"
    UNCERTAIN = "uncertain"


class BehaviorCategory(Enum):
    PREGNANT = "pregnant"
    NON_PREGNANT = "nonPregnant"


class EquipmentType(Enum):
    FEEDER = "feeder"
    WATER = "water"
    CAMERA = "camera"
    SENSOR = "sensor"


class EquipmentStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class ActivityStatus(Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"


class FeedPriority(Enum):
    NORMAL = "normal"
    ATTENTION = "attention"


def _serialize(value: Any) -> Any:
    """Convert a field value to a JSON-ready value"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class PregnancyStatus:
    is_pregnant: bool
    confidence: float  # percentage 0-100
    days_in_cycle: int
    breeding_date: Optional[datetime] = None
    expected_due_date: Optional[datetime] = None
    gestation_days: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isPregnant': self.is_pregnant,
            'confidence': self.confidence,
            'daysInCycle': self.days_in_cycle,
            'breedingDate': _serialize(self.breeding_date),
            'expectedDueDate': _serialize(self.expected_due_date),
            'gestationDays': self.gestation_days,
        }


@dataclass(frozen=True)
class Location:
    x: float  # barn coordinates
    y: float
    zone: Zone

    def to_dict(self) -> Dict[str, Any]:
        return {'x': self.x, 'y': self.y, 'zone': self.zone.value}


@dataclass(frozen=True)
class Vitals:
    temperature: float  # celsius
    heart_rate: int  # bpm
    rumination: int  # minutes per hour
    activity: int  # steps per hour

    def to_dict(self) -> Dict[str, Any]:
        return {
            'temperature': self.temperature,
            'heartRate': self.heart_rate,
            'rumination': self.rumination,
            'activity': self.activity,
        }


@dataclass(frozen=True)
class Behavior:
    """Behavior profile, every score on a 0-100 scale"""
    activity: float
    movement: float
    resting: float
    social: float
    feeding: float
    vocalization: float
    heat: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'activity': self.activity,
            'movement': self.movement,
            'resting': self.resting,
            'social': self.social,
            'feeding': self.feeding,
            'vocalization': self.vocalization,
            'heat': self.heat,
        }


@dataclass(frozen=True)
class Cow:
    """A monitored animal"""
    id: str
    breed: Breed
    age: int  # in months
    weight: float  # in kg
    health_status: HealthStatus
    pregnancy_status: PregnancyStatus
    location: Location
    last_activity: datetime
    last_checkup: datetime
    vitals: Vitals
    behavior: Behavior
    name: Optional[str] = None
    alerts: Tuple[str, ...] = ()  # alert ids, owned by the alerts collection

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'breed': _serialize(self.breed),
            'age': self.age,
            'weight': self.weight,
            'healthStatus': _serialize(self.health_status),
            'pregnancyStatus': self.pregnancy_status.to_dict(),
            'location': self.location.to_dict(),
            'lastActivity': _serialize(self.last_activity),
            'lastCheckup': _serialize(self.last_checkup),
            'vitals': self.vitals.to_dict(),
            'behavior': self.behavior.to_dict(),
            'alerts': list(self.alerts),
        }


@dataclass(frozen=True)
class Alert:
    id: str
    cow_id: str
    type: AlertType
    priority: AlertPriority
    title: str
    description: str
    timestamp: datetime
    resolved: bool
    action_required: bool
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    estimated_resolution_time: Optional[int] = None  # minutes

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'cowId': self.cow_id,
            'type': _serialize(self.type),
            'priority': _serialize(self.priority),
            'title': self.title,
            'description': self.description,
            'timestamp': _serialize(self.timestamp),
            'resolved': self.resolved,
            'resolvedBy': self.resolved_by,
            'resolvedAt': _serialize(self.resolved_at),
            'actionRequired': self.action_required,
            'estimatedResolutionTime': self.estimated_resolution_time,
        }


@dataclass(frozen=True)
class Activity:
    """Immutable activity log entry"""
    id: str
    cow_id: str
    timestamp: datetime
    activity_type: ActivityType
    duration: int  # minutes
    location: Location
    intensity: int  # 0-100
    heart_rate: Optional[int] = None
    temperature: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'cowId': self.cow_id,
            'timestamp': _serialize(self.timestamp),
            'activityType': _serialize(self.activity_type),
            'duration': self.duration,
            'location': self.location.to_dict(),
            'intensity': self.intensity,
            'heartRate': self.heart_rate,
            'temperature': self.temperature,
        }


@dataclass(frozen=True)
class TrendMetrics:
    average_activity: float
    peak_activity: float
    average_rumination: float
    average_temperature: float
    peak_temperature: float
    cows_active: int
    total_cows: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'averageActivity': self.average_activity,
            'peakActivity': self.peak_activity,
            'averageRumination': self.average_rumination,
            'averageTemperature': self.average_temperature,
            'peakTemperature': self.peak_temperature,
            'cowsActive': self.cows_active,
            'totalCows': self.total_cows,
        }


@dataclass(frozen=True)
class DailyTrend:
    date: date
    hour: int  # 0-23
    metrics: TrendMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': _serialize(self.date),
            'hour': self.hour,
            'metrics': self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class BarnZone:
    id: str
    type: Zone
    coordinates: Tuple[Tuple[float, float], ...]
    capacity: int
    current_occupancy: int
    temperature: Optional[float] = None
    humidity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': _serialize(self.type),
            'coordinates': [{'x': x, 'y': y} for x, y in self.coordinates],
            'capacity': self.capacity,
            'currentOccupancy': self.current_occupancy,
            'temperature': self.temperature,
            'humidity': self.humidity,
        }


@dataclass(frozen=True)
class Equipment:
    id: str
    type: EquipmentType
    position: Tuple[float, float]
    status: EquipmentStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': _serialize(self.type),
            'position': {'x': self.position[0], 'y': self.position[1]},
            'status': _serialize(self.status),
        }


@dataclass(frozen=True)
class BarnLayout:
    zones: Tuple[BarnZone, ...]
    dimensions: Dict[str, float]
    equipment: Tuple[Equipment, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'zones': [z.to_dict() for z in self.zones],
            'dimensions': dict(self.dimensions),
            'equipment': [e.to_dict() for e in self.equipment],
        }


@dataclass(frozen=True)
class PregnancyDistribution:
    breed: Breed
    pregnant: int
    not_pregnant: int
    uncertain: int
    total: int
    average_confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'breed': _serialize(self.breed),
            'pregnant': self.pregnant,
            'notPregnant': self.not_pregnant,
            'uncertain': self.uncertain,
            'total': self.total,
            'averageConfidence': self.average_confidence,
        }


@dataclass(frozen=True)
class BehavioralIndicator:
    category: BehaviorCategory
    metrics: Dict[str, int]  # activity, movement, resting, social, feeding

    def to_dict(self) -> Dict[str, Any]:
        return {'category': _serialize(self.category), 'metrics': dict(self.metrics)}


@dataclass(frozen=True)
class KPIMetrics:
    total_cows: int
    healthy_cows: int
    pregnant_cows: int
    alerts_count: int
    average_activity: int
    pregnancy_rate: float
    health_rate: float
    average_temperature: float
    changes: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalCows': self.total_cows,
            'healthyCows': self.healthy_cows,
            'pregnantCows': self.pregnant_cows,
            'alertsCount': self.alerts_count,
            'averageActivity': self.average_activity,
            'pregnancyRate': self.pregnancy_rate,
            'healthRate': self.health_rate,
            'averageTemperature': self.average_temperature,
            'changes': dict(self.changes),
        }


@dataclass(frozen=True)
class RealTimeActivityItem:
    id: str
    cow_id: str
    cow_name: str
    activity_type: ActivityType
    timestamp: datetime
    status: ActivityStatus
    duration: Optional[int] = None
    location: Optional[Zone] = None
    priority: Optional[FeedPriority] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'cowId': self.cow_id,
            'cowName': self.cow_name,
            'activityType': _serialize(self.activity_type),
            'timestamp': _serialize(self.timestamp),
            'duration': self.duration,
            'location': _serialize(self.location),
            'status': _serialize(self.status),
            'priority': _serialize(self.priority),
        }


@dataclass(frozen=True)
class Snapshot:
    """One complete, immutable generation of every collection and aggregate"""
    generated_at: datetime
    animals: Tuple[Cow, ...]
    alerts: Tuple[Alert, ...]
    activities: Tuple[Activity, ...]
    daily_trends: Tuple[DailyTrend, ...]
    barn_layout: BarnLayout
    pregnancy_distribution: Tuple[PregnancyDistribution, ...]
    behavioral_indicators: Tuple[BehavioralIndicator, ...]
    kpi_metrics: KPIMetrics
    real_time_activity: Tuple[RealTimeActivityItem, ...]
    seed: Optional[int] = None

    def cow_by_id(self, cow_id: str) -> Optional[Cow]:
        """Look up an animal by id"""
        for cow in self.animals:
            if cow.id == cow_id:
                return cow
        return None

    def alerts_for(self, cow_id: str) -> List[Alert]:
        return [alert for alert in self.alerts if alert.cow_id == cow_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generatedAt': _serialize(self.generated_at),
            'seed': self.seed,
            'animals': [c.to_dict() for c in self.animals],
            'alerts': [a.to_dict() for a in self.alerts],
            'activities': [a.to_dict() for a in self.activities],
            'dailyTrends': [t.to_dict() for t in self.daily_trends],
            'barnLayout': self.barn_layout.to_dict(),
            'pregnancyDistribution': [p.to_dict() for p in self.pregnancy_distribution],
            'behavioralIndicators': [b.to_dict() for b in self.behavioral_indicators],
            'kpiMetrics': self.kpi_metrics.to_dict(),
            'realTimeActivity': [r.to_dict() for r in self.real_time_activity],
        }
