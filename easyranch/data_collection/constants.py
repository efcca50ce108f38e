"""
Domain constants for the herd monitoring dashboard
"""

BREEDS = ('Holstein', 'Jersey', 'Angus', 'Hereford', 'Simmental')

GESTATION_PERIOD_DAYS = 283  # Average cow gestation period

BARN_DIMENSIONS = {
    'width': 100,
    'height': 60,
    'scale': 1,  # 1 unit = 1 meter
}

TEMPERATURE_THRESHOLDS = {
    'normal': (38.0, 39.5),  # Celsius
    'fever': (39.5, 41.0),
    'critical': (41.0, 43.0),
}

ACTIVITY_THRESHOLDS = {
    'low': (0, 30),
    'normal': (30, 70),
    'high': (70, 100),
}

# Physiological bounds used by record validation
VALIDATION_RANGES = {
    'age': (0, 360),  # months
    'weight': (200, 1000),  # kg
    'temperature': (35, 45),
    'confidence': (0, 100),
}

# Sampling ranges used when synthesizing animals; upper bounds are exclusive
# for integer draws
GENERATION_RANGES = {
    'age': (12, 120),
    'weight': (400, 700),
    'temperature': (38.0, 39.8),
    'heart_rate': (60, 80),
    'rumination': (20, 45),
    'steps': (100, 300),
    'days_in_cycle': (1, 283),
    'confidence_pregnant': (60, 95),
    'confidence_open': (5, 40),
    'heat_pregnant': (10, 30),
    'heat_open': (20, 80),
}

BEHAVIOR_RANGES = {
    'activity': (30, 90),
    'movement': (25, 85),
    'resting': (40, 80),
    'social': (20, 70),
    'feeding': (50, 90),
    'vocalization': (10, 60),
}

# Weighted pick list, sampled uniformly with repetition
HEALTH_STATUS_WEIGHTS = ('healthy', 'healthy', 'healthy', 'attention', 'sick')

# Zones an animal can be placed in at generation time
GENERATED_ZONES = ('feeding', 'resting', 'walkway', 'milking')

DEFAULT_POPULATION_SIZE = 50
DEFAULT_DAY_WINDOW = 7
DEFAULT_PREGNANCY_RATE = 0.65
DEFAULT_ALERT_COVERAGE = 0.3
DEFAULT_ALERT_RESOLVED_RATE = 0.4
DEFAULT_REALTIME_COUNT = 20
DEFAULT_ATTENTION_LIMIT = 5

COW_ID_PREFIX = 'COW'
ALERT_ID_PREFIX = 'ALERT'
ID_PAD_WIDTH = 3
