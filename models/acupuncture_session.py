# models/acupuncture_session.py

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from core.database import Base
from core.helpers import generate_id
from core.time_utils import now_utc
from models.body_region import BodyRegion, COUNT_COLUMNS


def _today():
    return now_utc().date()


class AcupunctureSession(Base):
    __tablename__ = "acupuncture_sessions"
    __table_args__ = tuple(
        CheckConstraint(f"{column} >= 0", name=f"ck_{column}_non_negative")
        for column in COUNT_COLUMNS
    )

    id = Column(String(36), primary_key=True, default=generate_id)

    # Link to patient
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)

    session_date = Column(Date, default=_today, nullable=False)

    # Needle counts per body region
    head_count = Column(Integer, default=0, nullable=False)
    trunk_count = Column(Integer, default=0, nullable=False)
    left_arm_count = Column(Integer, default=0, nullable=False)
    right_arm_count = Column(Integer, default=0, nullable=False)
    left_leg_count = Column(Integer, default=0, nullable=False)
    right_leg_count = Column(Integer, default=0, nullable=False)

    # Always recomputed from the six counts by services.session_service
    total_needles = Column(Integer, default=0, nullable=False)

    # Selected acupoints, e.g. "1, 5, 12"
    acupoints = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    needle_removal_time = Column(DateTime(timezone=True), nullable=True)

    # ORM relationships
    patient = relationship("Patient")

    def region_counts(self) -> dict:
        return {region: int(getattr(self, region.column) or 0) for region in BodyRegion}

    def recompute_total(self) -> int:
        self.total_needles = sum(self.region_counts().values())
        return self.total_needles

    @property
    def needle_removed(self) -> bool:
        return self.needle_removal_time is not None

    def __repr__(self):
        return f"<AcupunctureSession {self.id} for Patient {self.patient_id}>"
