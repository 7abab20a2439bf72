"""
Error taxonomy shared by the services and the Streamlit pages.

Pages catch ``TrackerError`` at the call site, log it and show the message
to the user. Nothing here is retried automatically.
"""


class TrackerError(Exception):
    """Base class for every error surfaced to the user."""


class ValidationError(TrackerError):
    """Input rejected before any store call was made."""


class NeedleRemovalAlreadyCompleted(ValidationError):
    def __init__(self, session_id=None):
        self.session_id = session_id
        super().__init__("Needle removal has already been recorded for this session.")


class StoreError(TrackerError):
    """Base class for failures reported by the data store."""


class ConflictError(StoreError):
    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class NotFoundError(StoreError):
    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found.")


class TransientStoreError(StoreError):
    """Network or server side failure; the user may retry the action."""
