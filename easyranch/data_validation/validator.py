"""
Record and snapshot validation.

Validation never raises and never blocks generation: every check reports
human-readable messages that callers can display or log.
"""
import re
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional

from easyranch.data_collection.constants import GESTATION_PERIOD_DAYS, VALIDATION_RANGES
from easyranch.data_collection.models import Alert, Cow, Snapshot

logger = logging.getLogger(__name__)

COW_ID_PATTERN = re.compile(r'^COW\d{3,}$')


class ValidationSeverity(Enum):
    """Validation severity levels"""
    ERROR = "error"
    WARNING = "warning"


def _out_of_range(value, bounds) -> bool:
    low, high = bounds
    return value is None or value < low or value > high


def validate_cow_data(cow: Cow) -> List[str]:
    """
    Check an animal record against physiological ranges

    Returns:
        List of error messages, empty when the record is valid
    """
    errors = []

    if not cow.id:
        errors.append('Cow ID is required')
    if not cow.breed:
        errors.append('Breed is required')
    if _out_of_range(cow.age, VALIDATION_RANGES['age']):
        errors.append('Invalid age')
    if _out_of_range(cow.weight, VALIDATION_RANGES['weight']):
        errors.append('Invalid weight')
    if _out_of_range(cow.vitals.temperature, VALIDATION_RANGES['temperature']):
        errors.append('Invalid temperature')
    if _out_of_range(cow.pregnancy_status.confidence, VALIDATION_RANGES['confidence']):
        errors.append('Invalid pregnancy confidence')

    return errors


def validate_alert_data(alert: Alert) -> List[str]:
    errors = []

    if not alert.id:
        errors.append('Alert ID is required')
    if not alert.cow_id:
        errors.append('Cow ID is required')
    if not alert.type:
        errors.append('Alert type is required')
    if not alert.priority:
        errors.append('Alert priority is required')
    if not alert.title:
        errors.append('Alert title is required')
    if not alert.timestamp:
        errors.append('Alert timestamp is required')

    return errors


@dataclass
class ValidationRule:
    """Snapshot-level validation rule returning zero or more messages"""
    name: str
    check_fn: Callable[[Snapshot], List[str]]
    description: str = ""
    severity: ValidationSeverity = ValidationSeverity.ERROR


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    rules_checked: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'rules_checked': self.rules_checked,
        }


def _record_fields(snapshot: Snapshot) -> List[str]:
    errors = []
    for cow in snapshot.animals:
        errors.extend(f"{cow.id or '<missing id>'}: {msg}" for msg in validate_cow_data(cow))
    for alert in snapshot.alerts:
        errors.extend(f"{alert.id or '<missing id>'}: {msg}" for msg in validate_alert_data(alert))
    return errors


def _unique_cow_ids(snapshot: Snapshot) -> List[str]:
    errors = []
    seen = set()
    for cow in snapshot.animals:
        if cow.id in seen:
            errors.append(f"Duplicate cow ID {cow.id}")
        seen.add(cow.id)
        if cow.id and not COW_ID_PATTERN.match(cow.id):
            errors.append(f"Cow ID {cow.id} does not follow the COW### scheme")
    return errors


def _due_dates(snapshot: Snapshot) -> List[str]:
    errors = []
    gestation = timedelta(days=GESTATION_PERIOD_DAYS)
    for cow in snapshot.animals:
        status = cow.pregnancy_status
        should_have = status.is_pregnant and status.breeding_date is not None
        if should_have and status.expected_due_date is None:
            errors.append(f"{cow.id}: expected due date missing")
        elif not should_have and status.expected_due_date is not None:
            errors.append(f"{cow.id}: expected due date set without pregnancy and breeding date")
        elif should_have and status.expected_due_date != status.breeding_date + gestation:
            errors.append(f"{cow.id}: expected due date is not breeding date + {GESTATION_PERIOD_DAYS} days")
    return errors


def _resolved_alerts(snapshot: Snapshot) -> List[str]:
    errors = []
    for alert in snapshot.alerts:
        if alert.resolved_at is not None and alert.resolved_at < alert.timestamp:
            errors.append(f"{alert.id}: resolved before it was raised")
        if alert.resolved and alert.resolved_at is None:
            errors.append(f"{alert.id}: resolved without a resolution time")
    return errors


def _alert_links(snapshot: Snapshot) -> List[str]:
    errors = []
    cows = {cow.id: cow for cow in snapshot.animals}
    for alert in snapshot.alerts:
        cow = cows.get(alert.cow_id)
        if cow is None:
            errors.append(f"{alert.id}: unknown cow {alert.cow_id}")
        elif alert.id not in cow.alerts:
            errors.append(f"{alert.id}: not referenced by cow {alert.cow_id}")
    alert_ids = {alert.id for alert in snapshot.alerts}
    for cow in snapshot.animals:
        for alert_id in cow.alerts:
            if alert_id not in alert_ids:
                errors.append(f"{cow.id}: references unknown alert {alert_id}")
    return errors


def _timestamps_not_in_future(snapshot: Snapshot) -> List[str]:
    errors = []
    for cow in snapshot.animals:
        if cow.last_activity > snapshot.generated_at:
            errors.append(f"{cow.id}: last activity after generation time")
        if cow.last_checkup > snapshot.generated_at:
            errors.append(f"{cow.id}: last checkup after generation time")
    for alert in snapshot.alerts:
        if alert.timestamp > snapshot.generated_at:
            errors.append(f"{alert.id}: raised after generation time")
        if alert.resolved_at is not None and alert.resolved_at > snapshot.generated_at:
            errors.append(f"{alert.id}: resolved after generation time")
    return errors


def _overdue_checkups(snapshot: Snapshot) -> List[str]:
    limit = timedelta(days=30)
    return [
        f"{cow.id}: no checkup in over 30 days"
        for cow in snapshot.animals
        if snapshot.generated_at - cow.last_checkup > limit
    ]


class RecordValidator:
    """
    Snapshot validator with registrable rules
    """

    def __init__(self):
        self.rules: Dict[str, ValidationRule] = {}
        self._initialize_default_rules()

        logger.info("Record validator initialized")

    def _initialize_default_rules(self) -> None:
        self.register_rule(ValidationRule(
            name="record_fields",
            check_fn=_record_fields,
            description="Cow and alert fields are present and in range"
        ))
        self.register_rule(ValidationRule(
            name="unique_cow_ids",
            check_fn=_unique_cow_ids,
            description="Cow IDs are unique and zero-padded"
        ))
        self.register_rule(ValidationRule(
            name="due_dates",
            check_fn=_due_dates,
            description="Due date present only for pregnant cows with a breeding date"
        ))
        self.register_rule(ValidationRule(
            name="resolved_alerts",
            check_fn=_resolved_alerts,
            description="Resolution time is not before the alert"
        ))
        self.register_rule(ValidationRule(
            name="alert_links",
            check_fn=_alert_links,
            description="Alerts and cows reference each other"
        ))
        self.register_rule(ValidationRule(
            name="timestamps_not_in_future",
            check_fn=_timestamps_not_in_future,
            description="Activity, checkup and alert times do not exceed generation time"
        ))
        self.register_rule(ValidationRule(
            name="overdue_checkups",
            check_fn=_overdue_checkups,
            description="Animals without a checkup in 30 days",
            severity=ValidationSeverity.WARNING
        ))

        logger.debug(f"Initialized {len(self.rules)} default validation rules")

    def register_rule(self, rule: ValidationRule) -> None:
        """Register a validation rule, replacing one with the same name"""
        self.rules[rule.name] = rule

    def unregister_rule(self, name: str) -> bool:
        return self.rules.pop(name, None) is not None

    def validate_snapshot(self, snapshot: Snapshot) -> ValidationReport:
        report = ValidationReport()

        for rule in self.rules.values():
            messages = rule.check_fn(snapshot)
            report.rules_checked += 1
            if rule.severity is ValidationSeverity.ERROR:
                report.errors.extend(messages)
            else:
                report.warnings.extend(messages)

        if report.errors:
            logger.warning(f"Snapshot validation found {len(report.errors)} errors")
        else:
            logger.info(f"Snapshot validation passed ({len(report.warnings)} warnings)")

        return report


_data_validator: Optional[RecordValidator] = None


def get_data_validator() -> RecordValidator:
    """Get or create the global validator"""
    global _data_validator
    if _data_validator is None:
        _data_validator = RecordValidator()
    return _data_validator


def reset_data_validator() -> None:
    """Reset the global validator (for testing)"""
    global _data_validator
    _data_validator = None


def validate_snapshot(snapshot: Snapshot) -> ValidationReport:
    return get_data_validator().validate_snapshot(snapshot)
