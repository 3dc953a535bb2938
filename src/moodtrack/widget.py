"""Snapshot file read by the home-screen streak widget."""

from datetime import date
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from moodtrack.aggregators.streak import STREAK_WINDOW_DAYS, last_seven_days, streak_count

logger = structlog.get_logger()

# The widget re-reads the snapshot at least this often.
REFRESH_MINUTES = 30


class WidgetSnapshot(BaseModel):
    """What the widget shows: current streak and the last seven days."""

    model_config = ConfigDict(populate_by_name=True)

    streak_count: int = Field(default=0, alias="streakCount")
    last_7_days: list[bool] = Field(
        default_factory=lambda: [False] * STREAK_WINDOW_DAYS,
        alias="last7Days",
        min_length=STREAK_WINDOW_DAYS,
        max_length=STREAK_WINDOW_DAYS,
    )

    @classmethod
    def from_days(cls, days_with_entries: set[date], today: date) -> "WidgetSnapshot":
        return cls(
            streak_count=streak_count(days_with_entries, today),
            last_7_days=last_seven_days(days_with_entries, today),
        )


class WidgetSnapshotWriter:
    """Writes and reads the shared snapshot file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def write(self, snapshot: WidgetSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(snapshot.model_dump_json(by_alias=True), encoding="utf-8")
        tmp.replace(self.path)
        logger.debug("Widget snapshot written", streak=snapshot.streak_count)

    def load(self) -> WidgetSnapshot:
        """Current snapshot; an empty one if the file is missing or unreadable."""
        try:
            return WidgetSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return WidgetSnapshot()
        except (OSError, ValidationError) as e:
            logger.warning("Could not read widget snapshot", error=str(e))
            return WidgetSnapshot()
