import logging

from sqlalchemy.orm import Session

from core.database import translate_store_errors
from core.errors import NeedleRemovalAlreadyCompleted, NotFoundError, ValidationError
from models.acupuncture_session import AcupunctureSession
from models.body_region import COUNT_COLUMNS
from models.patient import Patient
from services.session_counter import SessionCounter

logger = logging.getLogger(__name__)

# Fields a caller may write; total_needles is always derived from the counts
WRITABLE_FIELDS = set(COUNT_COLUMNS) | {"acupoints", "session_date"}


def _check_fields(fields: dict) -> dict:
    data = {key: value for key, value in fields.items() if key not in ("total_needles", "patient_id", "id")}
    unknown = set(data) - WRITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Invalid session field(s): {', '.join(sorted(unknown))}")
    for column in COUNT_COLUMNS:
        if column not in data:
            continue
        try:
            value = int(data[column])
        except (TypeError, ValueError):
            raise ValidationError("Needle counts must be whole numbers.") from None
        if value < 0:
            raise ValidationError("Needle counts cannot be negative.")
        data[column] = value
    return data


# -----------------------------
# Get all sessions for a patient
# -----------------------------
def list_sessions_for_patient(db: Session, patient_id: str, newest_first: bool = True):
    order = (
        (AcupunctureSession.created_at.desc(), AcupunctureSession.id.desc())
        if newest_first
        else (AcupunctureSession.created_at.asc(), AcupunctureSession.id.asc())
    )
    with translate_store_errors(db):
        return (
            db.query(AcupunctureSession)
            .filter(AcupunctureSession.patient_id == patient_id)
            .order_by(*order)
            .all()
        )


# -----------------------------
# Get session by ID
# -----------------------------
def get_session(db: Session, session_id: str) -> AcupunctureSession:
    with translate_store_errors(db):
        record = db.query(AcupunctureSession).filter(AcupunctureSession.id == session_id).first()
    if not record:
        raise NotFoundError("Session", session_id)
    return record


# -----------------------------
# Create a new session
# -----------------------------
def create_session(db: Session, fields: dict) -> AcupunctureSession:
    patient_id = fields.get("patient_id")
    if not patient_id:
        raise ValidationError("A patient is required to save a session.")
    data = _check_fields(fields)

    with translate_store_errors(db):
        if not db.query(Patient.id).filter(Patient.id == patient_id).first():
            raise NotFoundError("Patient", patient_id)

        record = AcupunctureSession(patient_id=patient_id, **data)
        record.recompute_total()
        db.add(record)
        db.commit()
        db.refresh(record)

    logger.info("Created session %s for patient %s (%d needles)", record.id, patient_id, record.total_needles)
    return record


# -----------------------------
# Update session attributes
# -----------------------------
def update_session(db: Session, session_id: str, fields: dict) -> AcupunctureSession:
    data = _check_fields(fields)
    record = get_session(db, session_id)

    with translate_store_errors(db):
        for key, value in data.items():
            setattr(record, key, value)
        record.recompute_total()
        db.commit()
        db.refresh(record)

    logger.info("Updated session %s (%d needles)", record.id, record.total_needles)
    return record


def delete_sessions_for_patient(db: Session, patient_id: str) -> int:
    with translate_store_errors(db):
        removed = (
            db.query(AcupunctureSession)
            .filter(AcupunctureSession.patient_id == patient_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    logger.info("Deleted %d session(s) for patient %s", removed, patient_id)
    return removed


# -----------------------------
# Persist the counter being edited
# -----------------------------
def save_counter(db: Session, counter: SessionCounter, patient_id: str, acupoints: str | None = None):
    """
    Insert or update the session held by ``counter``.

    A counter loaded from a saved session is written back with an update and
    keeps its counts; it must belong to ``patient_id``. A new session is
    inserted and the counter is cleared. On any error the counter is left
    untouched so the user can retry.
    """
    payload = counter.to_record(patient_id)

    if counter.is_editing_existing:
        owner = get_session(db, counter.session_id).patient_id
        if owner != patient_id:
            logger.warning(
                "Refused to save session %s for patient %s; it belongs to %s",
                counter.session_id, patient_id, owner,
            )
            raise ValidationError("This session belongs to another patient.")
        if acupoints is not None:
            payload["acupoints"] = acupoints
        return update_session(db, counter.session_id, payload)

    if acupoints:
        payload["acupoints"] = acupoints
    record = create_session(db, payload)
    counter.mark_saved()
    return record


# -----------------------------
# Needle removal
# -----------------------------
def complete_needle_removal(db: Session, session_id: str) -> AcupunctureSession:
    """Record needle removal once; a second call raises NeedleRemovalAlreadyCompleted."""
    record = get_session(db, session_id)
    try:
        update = SessionCounter.complete_needle_removal(record)
    except NeedleRemovalAlreadyCompleted:
        logger.warning("Needle removal already recorded for session %s", session_id)
        raise

    with translate_store_errors(db):
        # Conditional update so two concurrent completions cannot both apply
        applied = (
            db.query(AcupunctureSession)
            .filter(
                AcupunctureSession.id == session_id,
                AcupunctureSession.needle_removal_time.is_(None),
            )
            .update(update, synchronize_session=False)
        )
        db.commit()

    if not applied:
        logger.warning("Needle removal already recorded for session %s", session_id)
        raise NeedleRemovalAlreadyCompleted(session_id)

    db.refresh(record)
    logger.info("Needle removal recorded for session %s", session_id)
    return record
