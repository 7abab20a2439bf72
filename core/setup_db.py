# core/setup_db.py

from core.config import configure_logging
from core.database import init_db


def main():
    configure_logging()
    print("Creating database tables...")

    # Create all SQLAlchemy tables
    init_db()

    print("Database initialized successfully.")


if __name__ == "__main__":
    main()
