from .database import get_db_context, translate_store_errors, init_db, engine, SessionLocal, Base
from .helpers import generate_id, format_date, format_datetime, render_sidebar

# core.session_manager depends on services; import it directly from pages.

__all__ = [
    "get_db_context",
    "translate_store_errors",
    "init_db",
    "engine",
    "SessionLocal",
    "Base",
    "generate_id",
    "format_date",
    "format_datetime",
    "render_sidebar",
]
