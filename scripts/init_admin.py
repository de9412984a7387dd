import os

from dotenv import load_dotenv
from sqlalchemy import select

from slotbook.auth import hash_password
from slotbook.database import SessionLocal
from slotbook.models import Users


# ======================================================
# ENV
# ======================================================

load_dotenv()

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

MIN_PASSWORD_LENGTH = 8


# ======================================================
# MAIN LOGIC
# ======================================================

def main():
    if not ADMIN_USERNAME:
        raise RuntimeError("ADMIN_USERNAME is not set")

    if not ADMIN_PASSWORD or len(ADMIN_PASSWORD) < MIN_PASSWORD_LENGTH:
        raise RuntimeError(f"ADMIN_PASSWORD must be at least {MIN_PASSWORD_LENGTH} characters")

    with SessionLocal() as db:
        user = db.execute(
            select(Users).where(Users.username == ADMIN_USERNAME)
        ).scalar_one_or_none()

        # --- CASE 1: new admin ---
        if user is None:
            db.add(Users(
                username=ADMIN_USERNAME,
                password=hash_password(ADMIN_PASSWORD),
                role="admin",
                name=ADMIN_NAME,
                email=ADMIN_EMAIL,
            ))
            db.commit()
            print(f"[BOOTSTRAP] Admin created (username={ADMIN_USERNAME})")

        # --- CASE 2: existing user without admin role ---
        elif user.role != "admin":
            user.role = "admin"
            db.commit()
            print(f"[BOOTSTRAP] Admin role granted (username={ADMIN_USERNAME})")

        else:
            print("[BOOTSTRAP] Admin already exists, nothing to do")


# ======================================================
# ENTRYPOINT
# ======================================================

if __name__ == "__main__":
    main()
