"""
Create the jobs table on the configured database
"""
from jobboard.core.database import create_database
from jobboard.core.logging_config import configure_logging


def main():
    configure_logging()
    database = create_database()
    try:
        database.create_tables()
        print("✅ jobs table ready")
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
