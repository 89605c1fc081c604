#!/usr/bin/env python
"""
Seed Data
Script to seed the database with demo users, medications and dose logs
"""

import sys
import os
import argparse
import logging
import random
from datetime import datetime, timedelta
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import SessionLocal, engine, Base
from models import User, Medication, DoseLog
from tools.timing_classifier import classify_timing, parse_time_of_day


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEMO_USERS = [
    {
        "email": "jane.doe@example.com",
        "access_token": "demo-token-jane",
        "user_metadata": {"first_name": "Jane", "last_name": "Doe"},
        "medications": [("Metformin", "08:00"), ("Lisinopril", "08:30"), ("Atorvastatin", "21:00")],
    },
    {
        "email": "sam_lee@example.com",
        "access_token": "demo-token-sam",
        "user_metadata": {"full_name": "Sam Lee"},
        "medications": [("Levothyroxine", "07:00"), ("Vitamin D", "12:00")],
    },
    {
        "email": "pat.kumar@example.com",
        "access_token": "demo-token-pat",
        "user_metadata": {},
        "medications": [("Aspirin", "09:00")],
    },
]


def create_tables():
    """Create all database tables"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")


def seed_user(db, data: dict) -> User:
    """Create a demo user unless one with the same email exists"""
    existing = db.query(User).filter(User.email == data["email"]).first()
    if existing:
        logger.info(f"User {data['email']} already exists")
        return existing

    user = User(
        email=data["email"],
        access_token=data["access_token"],
        user_metadata=data["user_metadata"]
    )
    db.add(user)
    db.flush()
    logger.info(f"Created user {user.email} ({user.id})")
    return user


def seed_medications(db, user: User, medications: List[tuple]) -> List[Medication]:
    """Add a user's daily medications"""
    created = []
    for name, time_of_day in medications:
        medication = Medication(user_id=user.id, name=name, time=time_of_day, taken=False)
        db.add(medication)
        created.append(medication)

    db.flush()
    logger.info(f"Created {len(created)} medications for {user.email}")
    return created


def seed_dose_history(db, medications: List[Medication], days: int = 14):
    """Seed taken doses with realistic timing variance"""
    logger.info(f"Seeding {days} days of dose history...")

    random.seed(42)  # For reproducibility

    today = datetime.now().replace(second=0, microsecond=0)
    records_created = 0

    for medication in medications:
        hour, minute = parse_time_of_day(medication.time)

        for day_offset in range(1, days + 1):  # Skip today
            if random.random() > 0.85:
                continue

            scheduled_dt = (today - timedelta(days=day_offset)).replace(hour=hour, minute=minute)
            taken_at = scheduled_dt + timedelta(minutes=random.randint(-25, 45))
            timing = classify_timing(medication.time, taken_at)

            db.add(DoseLog(
                medication_id=medication.id,
                user_id=medication.user_id,
                taken_at=taken_at,
                scheduled_time=medication.time,
                status=timing.status,
                minutes_difference=timing.minutes
            ))
            records_created += 1

    db.flush()
    logger.info(f"Created {records_created} dose logs")


def seed_all(clear_existing: bool = False, days: int = 14):
    """Run all seed operations"""

    print("\n" + "="*60)
    print("Database Seeding")
    print("="*60)

    # Create tables
    create_tables()

    db = SessionLocal()

    try:
        if clear_existing:
            logger.info("Clearing existing data...")
            db.query(DoseLog).delete()
            db.query(Medication).delete()
            db.query(User).delete()
            db.commit()
            logger.info("Existing data cleared")

        for data in DEMO_USERS:
            user = seed_user(db, data)
            if db.query(Medication).filter(Medication.user_id == user.id).count():
                continue
            medications = seed_medications(db, user, data["medications"])
            seed_dose_history(db, medications, days=days)
            db.commit()

        # Print summary
        print("\n" + "="*60)
        print("Seeding Complete!")
        print("="*60)
        print(f"\nDatabase Statistics:")
        print(f"  Users: {db.query(User).count()}")
        print(f"  Medications: {db.query(Medication).count()}")
        print(f"  Dose Logs: {db.query(DoseLog).count()}")

        print("\nDemo access tokens:")
        for data in DEMO_USERS:
            print(f"  {data['email']}: {data['access_token']}")

    except Exception as e:
        db.rollback()
        logger.error(f"Error during seeding: {e}")
        raise
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(
        description="Seed the database with demo data"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing data before seeding"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=14,
        help="Days of dose history to generate"
    )

    args = parser.parse_args()

    seed_all(clear_existing=args.clear, days=args.days)


if __name__ == "__main__":
    main()
