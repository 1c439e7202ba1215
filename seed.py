"""
seed.py
───────
Creates the first admin account and the reference data (competencies,
activity types, recognized courses, sample events).
Run ONCE after the migration:

    python seed.py

Idempotent: rows that already exist (by email / name / title) are skipped.
Reads from .env; change SEED_ADMIN_* values there, or edit defaults below.
"""
import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv

load_dotenv()

# ── Change these in .env or edit here ────────────────────────────────
ADMIN_NAME     = os.getenv("SEED_ADMIN_NAME",     "Admin TIFPoint")
ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
ADMIN_EMAIL    = os.getenv("SEED_ADMIN_EMAIL",    "admin@tifpoint.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
# ─────────────────────────────────────────────────────────────────────

COMPETENCIES = [
    ("Software Developer", "Competency in software development"),
    ("Network Technology", "Competency in network technology"),
    ("Artificial Intelligence", "Competency in artificial intelligence"),
    ("Soft Skills", "Competency in soft skills"),
]

ACTIVITY_TYPES = [
    ("Seminar", "Participation in seminars"),
    ("Course", "Completion of courses"),
    ("Program", "Participation in programs"),
    ("Research", "Involvement in research"),
    ("Achievement", "Awards and achievements"),
]

COURSES = [
    {
        "name": "Intro to Web Development",
        "provider": "Codecademy",
        "duration": 40,
        "point_value": 4,
        "url": "https://www.codecademy.com/learn/introduction-to-web-development",
    },
    {
        "name": "Python Programming",
        "provider": "Coursera",
        "duration": 60,
        "point_value": 6,
        "url": "https://www.coursera.org/learn/python",
    },
    {
        "name": "Machine Learning Fundamentals",
        "provider": "edX",
        "duration": 80,
        "point_value": 8,
        "url": "https://www.edx.org/learn/machine-learning",
    },
]

logger = logging.getLogger("seed")


def _sample_events(now: datetime) -> list[dict]:
    return [
        {
            "title": "Tech Talk: Modern Web Development",
            "description": "Seminar on current web development practice",
            "date": now + timedelta(days=14),
            "location": "Main Auditorium",
            "organizer": "Informatics Student Association",
            "point_value": 2,
        },
        {
            "title": "AI Workshop",
            "description": "Hands-on introduction to machine learning",
            "date": now + timedelta(days=30),
            "location": "Computer Lab 3",
            "organizer": "AI Research Group",
            "point_value": 3,
        },
    ]


async def seed():
    from sqlalchemy import select

    from tifpoint.core.database import AsyncSessionLocal, engine
    from tifpoint.core.security import hash_password
    from tifpoint.models import (
        ActivityType,
        Competency,
        Event,
        RecognizedCourse,
        User,
        UserRole,
    )

    async with AsyncSessionLocal() as db:
        existing = (await db.execute(select(User).where(User.email == ADMIN_EMAIL))).scalar_one_or_none()
        if existing:
            logger.info("Admin already exists: %s (no changes)", ADMIN_EMAIL)
        else:
            db.add(
                User(
                    username=ADMIN_USERNAME,
                    email=ADMIN_EMAIL,
                    name=ADMIN_NAME,
                    password_hash=hash_password(ADMIN_PASSWORD),
                    role=UserRole.ADMIN,
                )
            )
            logger.info("Admin created: %s", ADMIN_EMAIL)

        for name, description in COMPETENCIES:
            found = (await db.execute(select(Competency).where(Competency.name == name))).scalar_one_or_none()
            if not found:
                db.add(Competency(name=name, description=description))

        for name, description in ACTIVITY_TYPES:
            found = (await db.execute(select(ActivityType).where(ActivityType.name == name))).scalar_one_or_none()
            if not found:
                db.add(ActivityType(name=name, description=description))

        for course in COURSES:
            found = (
                await db.execute(select(RecognizedCourse).where(RecognizedCourse.name == course["name"]))
            ).scalar_one_or_none()
            if not found:
                db.add(RecognizedCourse(**course))

        for event in _sample_events(datetime.now(timezone.utc)):
            found = (await db.execute(select(Event).where(Event.title == event["title"]))).scalar_one_or_none()
            if not found:
                db.add(Event(**event))

        await db.commit()

    await engine.dispose()

    logger.info("Reference data seeded")
    logger.info("Login endpoint : POST /api/auth/login")
    logger.warning("Change the admin password after first login!")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(seed())
