"""Backup export and import normalization.

Import documents are untrusted. `normalize_document` turns one into either a
`ValidDocument` or a `Rejected` value; it never raises for bad input and never
performs I/O, so the caller decides when (and whether) to commit the result.
"""

import json
import math
import re
from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime

from calorie_flow.domain.backup import (
    BACKUP_VERSION,
    BackupDocument,
    ImportResult,
    Rejected,
    RejectionKind,
    ValidDocument,
)
from calorie_flow.domain.logs import DailyLog
from calorie_flow.domain.profile import Gender, GoalType, Profile, default_profile
from calorie_flow.services.codec import (
    logs_from_dict,
    logs_to_dict,
    profile_from_dict,
    profile_to_dict,
)

BACKUP_PREFIX = "calorieflow_backup_"
DEFAULT_BACKUP_SUFFIX = ".wgd"

_MISSING = object()
_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_RADIX = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_NUMERIC_FIELDS = {
    "currentWeight": "current_weight",
    "targetWeight": "target_weight",
    "height": "height",
    "age": "age",
    "activityLevel": "activity_level",
}


def export_snapshot(
    profile: Profile, logs: Mapping[str, DailyLog], now: datetime | None = None
) -> BackupDocument:
    """Snapshot the profile and logs with a fresh export timestamp."""
    stamp = now or datetime.now(tz=UTC)
    return BackupDocument(
        profile=profile,
        logs=dict(logs),
        exported_at=stamp.isoformat(),
        version=BACKUP_VERSION,
    )


def document_to_dict(document: BackupDocument) -> dict[str, object]:
    """Return the JSON wire shape of a backup document."""
    return {
        "user": profile_to_dict(document.profile),
        "logs": logs_to_dict(document.logs),
        "version": document.version,
        "exportedAt": document.exported_at,
    }


def backup_filename(day: str, suffix: str = DEFAULT_BACKUP_SUFFIX) -> str:
    """Return the download name for a backup taken on `day`."""
    return f"{BACKUP_PREFIX}{day}{suffix}"


def parse_document(raw_text: str, now: datetime | None = None) -> ImportResult:
    """Decode backup text and normalize it."""
    try:
        data = json.loads(raw_text)
    except (TypeError, ValueError, RecursionError) as exc:
        return Rejected(kind=RejectionKind.PARSE, reason=f"Invalid JSON: {exc}")
    return normalize_document(data, now=now)


def normalize_document(data: object, now: datetime | None = None) -> ImportResult:
    """Validate and coerce a decoded backup document."""
    if not isinstance(data, Mapping):
        return Rejected(kind=RejectionKind.FORMAT, reason="Document is not an object")
    user = data.get("user")
    raw_logs = data.get("logs")
    if not _is_present(user) or not _is_present(raw_logs):
        return Rejected(
            kind=RejectionKind.FORMAT, reason="Document has no user or logs data"
        )
    if not isinstance(user, Mapping):
        return Rejected(kind=RejectionKind.FORMAT, reason="user must be an object")
    try:
        logs = logs_from_dict(raw_logs)
    except ValueError as exc:
        return Rejected(kind=RejectionKind.FORMAT, reason=str(exc))
    return ValidDocument(profile=normalize_profile(user, now=now), logs=logs)


def normalize_profile(
    user: Mapping[str, object], now: datetime | None = None
) -> Profile:
    """Build a profile from untrusted fields: defaults, raw fields, overrides."""
    stamp = now or datetime.now(tz=UTC)
    defaults = default_profile(stamp)
    layered = profile_from_dict(user, defaults)

    overrides: dict[str, object] = {}
    for wire_key, attribute in _NUMERIC_FIELDS.items():
        overrides[attribute] = _number_or_default(
            user.get(wire_key, _MISSING), getattr(defaults, attribute)
        )
    return replace(
        layered,
        **overrides,  # type: ignore[arg-type]
        name=user.get("name") or defaults.name,  # type: ignore[arg-type]
        gender=normalize_gender(user.get("gender", _MISSING)),
        goal_type=normalize_goal(user.get("goalType", _MISSING)),
        manual_tdee=normalize_manual_tdee(user.get("manualTDEE", _MISSING)),
        updated_at=stamp.isoformat(),
    )


def normalize_gender(value: object) -> Gender:
    """Map any value to a gender; only "female" (any case) is female."""
    # Non-string values such as lists are never read as female.
    if isinstance(value, str) and value.lower() == Gender.FEMALE.value:
        return Gender.FEMALE
    return Gender.MALE


def normalize_goal(value: object) -> GoalType:
    """Accept a known goal token, defaulting to weight loss."""
    for goal in GoalType:
        if value == goal.value:
            return goal
    return GoalType.LOSE


def normalize_manual_tdee(value: object) -> int | float | None:
    """Keep a manual TDEE only when it is a positive finite number."""
    number = coerce_number(value)
    if math.isfinite(number) and number > 0:
        return _compact(number)
    return None


def coerce_number(value: object) -> float:
    """Coerce a loosely typed value to a number, NaN when it is not one.

    Mirrors JavaScript's Number(): null, booleans and blank strings map to 0,
    numeric strings (decimal or 0x/0o/0b) are parsed, everything else is NaN.
    """
    if value is _MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool | int | float):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL.fullmatch(text):
            return float(text)
        if _RADIX.fullmatch(text):
            try:
                return float(int(text, 0))
            except OverflowError:
                return math.inf
        if text in {"Infinity", "+Infinity"}:
            return math.inf
        if text == "-Infinity":
            return -math.inf
    return math.nan


def _is_present(value: object) -> bool:
    if value is None or value is False or value == "":
        return False
    return not (isinstance(value, int | float) and value == 0)


def _number_or_default(value: object, fallback: float) -> int | float:
    number = coerce_number(value)
    if math.isfinite(number):
        return _compact(number)
    return fallback


def _compact(number: float) -> int | float:
    return int(number) if number.is_integer() else number
