from .body_region import BodyRegion, REGION_LABELS, COUNT_COLUMNS
from .patient import Patient
from .acupuncture_session import AcupunctureSession

__all__ = [
    "BodyRegion",
    "REGION_LABELS",
    "COUNT_COLUMNS",
    "Patient",
    "AcupunctureSession",
]
