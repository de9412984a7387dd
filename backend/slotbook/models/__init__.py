from .tables import Base, Bookings, Slots, Subjects, Users, metadata, new_id, utc_now

__all__ = [
    "Base",
    "metadata",
    "Users",
    "Subjects",
    "Slots",
    "Bookings",
    "new_id",
    "utc_now",
]
