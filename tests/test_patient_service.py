"""
Integration tests for the patient store against an in-memory database.

Tests CRUD operations, the medical record number uniqueness rule,
list summaries, search and the cascading delete.
"""
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from core.errors import ConflictError, NotFoundError, TransientStoreError, ValidationError
from models.acupuncture_session import AcupunctureSession
from models.patient import Patient
from services.patient_service import (
    create_patient,
    delete_patient,
    get_patient,
    list_patient_summaries,
    list_patients,
    search_patients,
    update_patient,
)
from services.session_counter import SessionCounter
from services.session_service import save_counter


def _save_session(db, patient_id, **counts):
    counter = SessionCounter()
    for region, value in counts.items():
        for _ in range(value):
            counter.increment(region.replace("_", "-"))
    return save_counter(db, counter, patient_id)


class TestPatientCreate:

    def test_create_patient_success(self, db):
        patient = create_patient(
            db,
            medical_record_number="  MRN0100 ",
            name="Lin Wei",
            gender="Male",
            patient_group="Group 2",
            bed_number="",
        )

        assert patient.id
        assert patient.medical_record_number == "MRN0100"
        assert patient.gender == "Male"
        assert patient.patient_group == "Group 2"
        assert patient.bed_number is None
        assert patient.created_at is not None

    def test_create_patient_minimal_fields(self, db):
        patient = create_patient(db, medical_record_number="MRN0101", name="Wu Jing", gender="Female")

        assert patient.patient_group is None
        assert patient.bed_number is None

    def test_create_patient_duplicate_mrn(self, db, patient):
        with pytest.raises(ConflictError) as exc_info:
            create_patient(db, medical_record_number=patient.medical_record_number, name="Other", gender="Male")

        assert exc_info.value.field == "medical_record_number"
        assert db.query(Patient).count() == 1

    @pytest.mark.parametrize("missing", ["medical_record_number", "name", "gender"])
    def test_create_patient_missing_required_field(self, db, missing):
        fields = {"medical_record_number": "MRN0102", "name": "Huang Li", "gender": "Male"}
        fields[missing] = "  "

        with pytest.raises(ValidationError):
            create_patient(db, **fields)
        assert db.query(Patient).count() == 0

    def test_create_patient_invalid_gender(self, db):
        with pytest.raises(ValidationError):
            create_patient(db, medical_record_number="MRN0103", name="Huang Li", gender="unknown")

    def test_create_patient_unknown_field(self, db):
        with pytest.raises(ValidationError):
            create_patient(db, medical_record_number="MRN0104", name="Huang Li", gender="Male", age=40)


class TestPatientRead:

    def test_get_patient(self, db, patient):
        assert get_patient(db, patient.id).name == "Chen Mei"

    def test_get_missing_patient(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            get_patient(db, "does-not-exist")

        assert exc_info.value.entity == "Patient"

    def test_list_patients_newest_first(self, db, patient):
        newer = create_patient(db, medical_record_number="MRN0002", name="Zhang San", gender="Male")

        ids = [p.id for p in list_patients(db)]

        assert ids == [newer.id, patient.id]

    def test_summaries_include_session_stats(self, db, patient):
        other = create_patient(db, medical_record_number="MRN0002", name="Zhang San", gender="Male")
        _save_session(db, patient.id, head=2)
        _save_session(db, patient.id, trunk=1)

        summaries = {s.patient.id: s for s in list_patient_summaries(db)}

        assert summaries[patient.id].session_count == 2
        assert summaries[patient.id].last_session_date is not None
        assert summaries[other.id].session_count == 0
        assert summaries[other.id].last_session_date is None

    def test_search_by_name_or_mrn(self, db, patient):
        create_patient(db, medical_record_number="X-77", name="Zhang San", gender="Male")
        patients = list_patients(db)

        assert [p.name for p in search_patients(patients, "chen")] == ["Chen Mei"]
        assert [p.name for p in search_patients(patients, "x-7")] == ["Zhang San"]
        assert len(search_patients(patients, "")) == 2

    def test_search_accepts_summaries(self, db, patient):
        summaries = list_patient_summaries(db)

        assert search_patients(summaries, "mrn0001")[0].patient.id == patient.id

    def test_read_failure_is_transient(self, db):
        with mock.patch.object(db, "query", side_effect=OperationalError("SELECT", {}, Exception("down"))):
            with pytest.raises(TransientStoreError):
                list_patients(db)


class TestPatientUpdate:

    def test_update_patient_fields(self, db, patient):
        updated = update_patient(db, patient.id, name="Chen Mei-Ling", bed_number="7")

        assert updated.name == "Chen Mei-Ling"
        assert updated.bed_number == "7"
        assert updated.medical_record_number == "MRN0001"

    def test_update_keeps_own_mrn(self, db, patient):
        updated = update_patient(db, patient.id, medical_record_number="MRN0001", name="Chen Mei")

        assert updated.medical_record_number == "MRN0001"

    def test_update_to_duplicate_mrn(self, db, patient):
        other = create_patient(db, medical_record_number="MRN0002", name="Zhang San", gender="Male")

        with pytest.raises(ConflictError):
            update_patient(db, other.id, medical_record_number="MRN0001")

        db.expire_all()
        assert get_patient(db, other.id).medical_record_number == "MRN0002"

    def test_update_missing_patient(self, db):
        with pytest.raises(NotFoundError):
            update_patient(db, "does-not-exist", name="Nobody")

    def test_update_rejects_blank_required_field(self, db, patient):
        with pytest.raises(ValidationError):
            update_patient(db, patient.id, name="")


class TestPatientDelete:

    def test_delete_removes_sessions_first(self, db, patient):
        _save_session(db, patient.id, head=1)
        _save_session(db, patient.id, left_leg=2)

        delete_patient(db, patient.id)

        assert db.query(Patient).count() == 0
        assert db.query(AcupunctureSession).count() == 0

    def test_delete_leaves_other_patients(self, db, patient):
        other = create_patient(db, medical_record_number="MRN0002", name="Zhang San", gender="Male")
        kept = _save_session(db, other.id, trunk=3)

        delete_patient(db, patient.id)

        assert [p.id for p in list_patients(db)] == [other.id]
        assert db.query(AcupunctureSession).filter_by(id=kept.id).count() == 1

    def test_delete_missing_patient(self, db):
        with pytest.raises(NotFoundError):
            delete_patient(db, "does-not-exist")

    def test_failed_delete_rolls_back_sessions(self, db, patient):
        _save_session(db, patient.id, head=1)

        with mock.patch.object(db, "commit", side_effect=OperationalError("DELETE", {}, Exception("down"))):
            with pytest.raises(TransientStoreError):
                delete_patient(db, patient.id)

        assert db.query(Patient).count() == 1
        assert db.query(AcupunctureSession).count() == 1
