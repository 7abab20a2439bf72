# models/patient.py

from sqlalchemy import Column, String, DateTime
from core.database import Base
from core.helpers import generate_id
from core.time_utils import now_utc


class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=generate_id)

    # Hospital medical record number, scanned or typed at registration
    medical_record_number = Column(String, unique=True, index=True, nullable=False)

    # Demographics
    name = Column(String, nullable=False)
    gender = Column(String, nullable=False)

    # Ward placement (optional)
    patient_group = Column(String, nullable=True)
    bed_number = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    def __repr__(self):
        return f"<Patient {self.medical_record_number} - {self.name}>"
