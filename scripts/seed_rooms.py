import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from database.connection import Base, SessionLocal, engine
import models  # noqa: F401  registers every table
from models.room import Room


ROOMS = [
    {"name": "Brishti Bilash", "capacity": 4, "category": "Cottage"},
    {"name": "Purnota", "capacity": 4, "category": "Cottage"},
    {"name": "Iraboti", "capacity": 4, "category": "Semi-Duplex"},
    {"name": "Mayaboti", "capacity": 4, "category": "Semi-Duplex"},
    {"name": "Tent", "capacity": 10, "category": "Tent"},
]


# Simple upsert helper

def get_or_create(db, model, defaults=None, **kwargs):
    defaults = defaults or {}
    instance = db.query(model).filter_by(**kwargs).first()
    if instance:
        for k, v in defaults.items():
            if getattr(instance, k) != v:
                setattr(instance, k, v)
        return instance, False
    instance = model(**kwargs, **defaults)
    db.add(instance)
    return instance, True


def seed_rooms():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = 0
        for payload in ROOMS:
            payload = dict(payload)
            name = payload.pop("name")
            _, was_created = get_or_create(db, Room, name=name, defaults=payload)
            created += int(was_created)
        db.commit()
        print(f"Seed OK - created {created} rooms, {len(ROOMS) - created} already present")
    except Exception as e:
        db.rollback()
        print(f"Seed failed: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    seed_rooms()
