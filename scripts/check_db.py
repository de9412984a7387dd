from sqlalchemy import func, select, text

from slotbook.database import SessionLocal
from slotbook.models import Bookings, Slots, Subjects


def main():
    db = SessionLocal()
    try:
        print("DB OK:", db.execute(text("SELECT 1")).scalar())
        print("Subjects:", db.execute(select(func.count(Subjects.id))).scalar_one())
        print("Slots:", db.execute(select(func.count(Slots.id))).scalar_one())
        print("Bookings:", db.execute(select(func.count(Bookings.id))).scalar_one())
    finally:
        db.close()


if __name__ == "__main__":
    main()
