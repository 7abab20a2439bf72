import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.database import translate_store_errors
from core.errors import ConflictError, NotFoundError, ValidationError
from models.patient import Patient
from models.acupuncture_session import AcupunctureSession

logger = logging.getLogger(__name__)

GENDER_OPTIONS = ["Male", "Female"]

REQUIRED_FIELDS = ("medical_record_number", "name", "gender")
OPTIONAL_FIELDS = ("patient_group", "bed_number")

FIELD_LABELS = {
    "medical_record_number": "Medical record number",
    "name": "Name",
    "gender": "Gender",
}


@dataclass
class PatientSummary:
    patient: Patient
    session_count: int = 0
    last_session_date: date | None = None


# ------------------------------------------
# Field validation
# ------------------------------------------
def clean_patient_fields(fields: dict, partial: bool = False) -> dict:
    """Trim values and enforce required fields before any store call.

    With ``partial=True`` only the supplied keys are checked (updates).
    """
    unknown = set(fields) - set(REQUIRED_FIELDS) - set(OPTIONAL_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown patient field(s): {', '.join(sorted(unknown))}")

    cleaned = {}
    for key in REQUIRED_FIELDS:
        if key not in fields and partial:
            continue
        value = (fields.get(key) or "").strip()
        if not value:
            raise ValidationError(f"{FIELD_LABELS[key]} is required.")
        cleaned[key] = value

    if "gender" in cleaned and cleaned["gender"] not in GENDER_OPTIONS:
        raise ValidationError(f"Gender must be one of: {', '.join(GENDER_OPTIONS)}.")

    for key in OPTIONAL_FIELDS:
        if key in fields:
            cleaned[key] = (fields.get(key) or "").strip() or None

    return cleaned


def _ensure_unique_mrn(db: Session, medical_record_number: str, exclude_id: str | None = None):
    query = db.query(Patient.id).filter(Patient.medical_record_number == medical_record_number)
    if exclude_id is not None:
        query = query.filter(Patient.id != exclude_id)
    if query.first():
        logger.warning("Duplicate medical record number %s", medical_record_number)
        raise ConflictError(
            "Medical record number already exists, please use another one.",
            field="medical_record_number",
        )


# ------------------------------------------
# Create a new patient
# ------------------------------------------
def create_patient(db: Session, **fields) -> Patient:
    cleaned = clean_patient_fields(fields)

    with translate_store_errors(db):
        _ensure_unique_mrn(db, cleaned["medical_record_number"])
        patient = Patient(**cleaned)
        db.add(patient)
        db.commit()
        db.refresh(patient)

    logger.info("Created patient %s (%s)", patient.id, patient.medical_record_number)
    return patient


# ------------------------------------------
# Fetch patients
# ------------------------------------------
def get_patient(db: Session, patient_id: str) -> Patient:
    with translate_store_errors(db):
        patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient:
        raise NotFoundError("Patient", patient_id)
    return patient


def list_patients(db: Session) -> list[Patient]:
    with translate_store_errors(db):
        return (
            db.query(Patient)
            .order_by(Patient.created_at.desc(), Patient.id)
            .all()
        )


def list_patient_summaries(db: Session) -> list[PatientSummary]:
    """Patients newest first, with their session count and last session date."""
    with translate_store_errors(db):
        stats = (
            db.query(
                AcupunctureSession.patient_id,
                func.count(AcupunctureSession.id),
                func.max(AcupunctureSession.session_date),
            )
            .group_by(AcupunctureSession.patient_id)
            .all()
        )
        patients = list_patients(db)

    by_patient = {patient_id: (count, last) for patient_id, count, last in stats}
    summaries = []
    for patient in patients:
        count, last = by_patient.get(patient.id, (0, None))
        summaries.append(PatientSummary(patient=patient, session_count=count, last_session_date=last))
    return summaries


def search_patients(patients, query: str):
    """Case-insensitive substring match on name or medical record number."""
    q = (query or "").strip().lower()
    if not q:
        return list(patients)

    def _patient(item):
        return item.patient if isinstance(item, PatientSummary) else item

    return [
        item for item in patients
        if q in (_patient(item).name or "").lower()
        or q in (_patient(item).medical_record_number or "").lower()
    ]


# ------------------------------------------
# Update patient basic info
# ------------------------------------------
def update_patient(db: Session, patient_id: str, **fields) -> Patient:
    cleaned = clean_patient_fields(fields, partial=True)
    patient = get_patient(db, patient_id)

    with translate_store_errors(db):
        if "medical_record_number" in cleaned:
            _ensure_unique_mrn(db, cleaned["medical_record_number"], exclude_id=patient.id)
        for key, value in cleaned.items():
            setattr(patient, key, value)
        db.commit()
        db.refresh(patient)

    logger.info("Updated patient %s", patient.id)
    return patient


# ------------------------------------------
# Delete a patient and their sessions
# ------------------------------------------
def delete_patient(db: Session, patient_id: str):
    """Delete the patient's sessions, then the patient, in one transaction.

    A failure on either step rolls back both.
    """
    patient = get_patient(db, patient_id)

    with translate_store_errors(db):
        # Delete all sessions first to avoid FK constraint issues
        removed = (
            db.query(AcupunctureSession)
            .filter(AcupunctureSession.patient_id == patient.id)
            .delete(synchronize_session=False)
        )
        db.delete(patient)
        db.commit()

    logger.info("Deleted patient %s and %d session(s)", patient_id, removed)
