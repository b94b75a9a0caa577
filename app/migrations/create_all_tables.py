"""
Migration script to create all database tables

Run this script to create all database tables:
    python -m app.migrations.create_all_tables

Set ADMIN_EMAIL, ADMIN_USERNAME and ADMIN_PASSWORD to also seed an
administrator account (skipped when the email is already registered).
"""

import os

from app.database import Database, Base
from app.models.user import User, UserRole
from app.utils.security import hash_password


def seed_admin(database: Database):
    """Create the first administrator from environment variables"""
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        print("\nADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin seed")
        return

    db = database.session()
    try:
        if db.query(User).filter(User.email == email).first():
            print(f"\nAdmin {email} already exists")
            return
        db.add(User(
            name=os.getenv("ADMIN_NAME", "Administrator"),
            username=os.getenv("ADMIN_USERNAME", "admin"),
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
            is_active=True,
        ))
        db.commit()
        print(f"\nAdmin {email} created")
    finally:
        db.close()


def create_tables():
    """Create all database tables"""
    print("=" * 60)
    print("Creating all database tables...")
    print("=" * 60)

    database = Database.from_config()
    database.connect()
    try:
        database.create_all()

        print("\nAll tables created successfully!")
        print("\nTables created:")
        for table in Base.metadata.sorted_tables:
            print(f"   - {table.name}")
        print("=" * 60)

        seed_admin(database)
    finally:
        database.disconnect()


if __name__ == "__main__":
    create_tables()
