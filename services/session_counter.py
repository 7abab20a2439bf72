"""
Needle counts for the treatment currently being edited.

A ``SessionCounter`` lives in ``st.session_state`` for the duration of a
treatment. It is mutated synchronously by button callbacks and converted to
and from the ``acupuncture_sessions`` row shape by ``to_record`` and
``from_record``. Persistence is handled by ``services.session_service``.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum

from core.errors import NeedleRemovalAlreadyCompleted, ValidationError
from core.time_utils import ensure_aware, now_utc
from models.body_region import BodyRegion


class CounterState(str, Enum):
    IDLE = "idle"          # fresh, or just saved
    EDITING = "editing"    # mutated or loaded from a saved session


def _field(record, name):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _region(region) -> BodyRegion:
    try:
        return BodyRegion(region)
    except ValueError:
        raise ValidationError(f"Unknown body region: {region!r}") from None


class SessionCounter:
    def __init__(self):
        self._counts = {region: 0 for region in BodyRegion}
        self.session_id = None
        self.state = CounterState.IDLE

    # -----------------------------
    # Mutation
    # -----------------------------
    def increment(self, region):
        key = _region(region)
        self._counts[key] += 1
        self.state = CounterState.EDITING

    def decrement(self, region):
        key = _region(region)
        if self._counts[key] > 0:
            self._counts[key] -= 1
        self.state = CounterState.EDITING

    def reset_one(self, region):
        self._counts[_region(region)] = 0
        self.state = CounterState.EDITING

    def reset_all(self):
        for region in self._counts:
            self._counts[region] = 0
        self.state = CounterState.EDITING

    def mark_saved(self):
        """Clear the counter after a successful save, ready for the next session."""
        for region in self._counts:
            self._counts[region] = 0
        self.session_id = None
        self.state = CounterState.IDLE

    # -----------------------------
    # Queries
    # -----------------------------
    def count(self, region) -> int:
        return self._counts[_region(region)]

    @property
    def counts(self) -> dict:
        return dict(self._counts)

    def total(self) -> int:
        return sum(self._counts.values())

    def active_region_count(self) -> int:
        return sum(1 for value in self._counts.values() if value > 0)

    @property
    def is_editing_existing(self) -> bool:
        return self.session_id is not None

    # -----------------------------
    # Record mapping
    # -----------------------------
    def to_record(self, patient_id) -> dict:
        """Row payload for ``acupuncture_sessions``; refuses an empty session."""
        if not patient_id:
            raise ValidationError("A patient is required to save a session.")
        total = self.total()
        if total == 0:
            raise ValidationError("Add at least one needle before saving.")

        record = {"patient_id": patient_id}
        for region in BodyRegion:
            record[region.column] = self._counts[region]
        record["total_needles"] = total
        return record

    def from_record(self, record):
        """Load the six counts of a saved session for editing.

        needle_removal_time is display-only and is not part of the counter.
        """
        for region in BodyRegion:
            value = int(_field(record, region.column) or 0)
            if value < 0:
                raise ValidationError(f"Negative count for {region.label}.")
            self._counts[region] = value
        self.session_id = _field(record, "id")
        self.state = CounterState.EDITING
        return self

    @classmethod
    def loaded_from(cls, record) -> "SessionCounter":
        return cls().from_record(record)

    @staticmethod
    def complete_needle_removal(record, now: datetime | None = None) -> dict:
        """
        Update payload marking needle removal on ``record``.

        One-way transition: raises NeedleRemovalAlreadyCompleted when the
        record already carries a removal time. The timestamp never precedes
        the record's creation time.
        """
        if _field(record, "needle_removal_time") is not None:
            raise NeedleRemovalAlreadyCompleted(_field(record, "id"))

        removed_at = now or now_utc()
        created_at = ensure_aware(_field(record, "created_at"))
        if created_at is not None and ensure_aware(removed_at) < created_at:
            removed_at = created_at
        return {"needle_removal_time": removed_at}

    def __repr__(self):
        counts = ", ".join(f"{region.value}={value}" for region, value in self._counts.items())
        return f"<SessionCounter {self.state.value} {counts}>"
