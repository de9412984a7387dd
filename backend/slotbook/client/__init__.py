"""
Python client for the public booking API and the reservation flow a
student-facing frontend follows.
"""

from .api import BookingApiClient, BookingApiError
from .reservation import ReservationFlow, Step, SubmitOutcome, SubmitResult

__all__ = [
    "BookingApiClient",
    "BookingApiError",
    "ReservationFlow",
    "Step",
    "SubmitOutcome",
    "SubmitResult",
]
