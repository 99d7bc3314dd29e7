"""Domain models for backup export and import."""

from dataclasses import dataclass
from enum import Enum

from calorie_flow.domain.logs import DailyLogs
from calorie_flow.domain.profile import Profile

BACKUP_VERSION = "1.0"


@dataclass(frozen=True)
class BackupDocument:
    """Snapshot of the full state for transfer."""

    profile: Profile
    logs: DailyLogs
    exported_at: str
    version: str = BACKUP_VERSION


class RejectionKind(str, Enum):
    """Why an import document was refused."""

    FORMAT = "format"
    PARSE = "parse"


@dataclass(frozen=True)
class ValidDocument:
    """A normalized import ready to replace the live state."""

    profile: Profile
    logs: DailyLogs

    def preview(self) -> dict[str, object]:
        """Return the fields shown when asking the user to confirm."""
        return {
            "name": self.profile.name,
            "currentWeight": self.profile.current_weight,
            "days": len(self.logs),
        }


@dataclass(frozen=True)
class Rejected:
    """An import document that cannot be used."""

    kind: RejectionKind
    reason: str


ImportResult = ValidDocument | Rejected
