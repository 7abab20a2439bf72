"""
Pytest configuration for the entire test suite.

Each test gets a fresh in-memory SQLite database so tests never touch the
file under data/.
"""
import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, build_engine, init_db
from services.patient_service import create_patient
from services.settings_service import JsonFileSettingsStore


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def patient(db):
    return create_patient(
        db,
        medical_record_number="MRN0001",
        name="Chen Mei",
        gender="Female",
        patient_group="Group 1",
        bed_number="12",
    )


@pytest.fixture
def settings_store(tmp_path):
    return JsonFileSettingsStore(str(tmp_path / "local_settings.json"))
