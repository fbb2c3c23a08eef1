"""
Database initialization script
Creates the database, all tables and the first admin user
Usage: python scripts/init_db.py
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine, func, text

from adwarden.core.config import settings
from adwarden.core.database import engine, SessionLocal, Base
from adwarden.core.security import get_password_hash
from adwarden.models import User
from adwarden.models.enums import UserRole


def create_database():
    """Create the database if it doesn't exist"""
    postgres_url = f"postgresql://{settings.POSTGRES_USER}:{settings.POSTGRES_PWD}@{settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/postgres"
    temp_engine = create_engine(postgres_url, isolation_level="AUTOCOMMIT")

    with temp_engine.connect() as conn:
        exists = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :name"),
            {"name": settings.POSTGRES_DB},
        ).fetchone() is not None

        if not exists:
            conn.execute(text(f'CREATE DATABASE "{settings.POSTGRES_DB}"'))
            print(f"Created database: {settings.POSTGRES_DB}")
        else:
            print(f"Database already exists: {settings.POSTGRES_DB}")

    temp_engine.dispose()


def create_tables():
    """Create all tables"""
    Base.metadata.create_all(bind=engine)
    print("All tables created")


def seed_admin():
    """Create the admin user when the users table is empty"""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        print("Skipping admin seed: ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        return

    session = SessionLocal()

    try:
        if session.query(func.count(User.id)).scalar():
            print("Users already exist. Skipping admin seed.")
            return

        session.add(
            User(
                email=settings.ADMIN_EMAIL,
                password_hash=get_password_hash(settings.ADMIN_PASSWORD),
                display_name="Admin",
                role=UserRole.ADMIN,
                is_active=True,
            )
        )
        session.commit()
        print(f"Admin user created: {settings.ADMIN_EMAIL}")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def main():
    print("=" * 50)
    print(f"{settings.APP_NAME} - Database Initialization")
    print("=" * 50)

    try:
        print("\nStep 1: Creating database...")
        create_database()

        print("\nStep 2: Creating tables...")
        create_tables()

        print("\nStep 3: Seeding admin user...")
        seed_admin()

        print("\nDatabase initialization completed")
    except Exception as e:
        print(f"\nInitialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
