# Request builders shared by the route and client tests.

from slotbook.models import Slots


def booking_payload(slot: Slots, student_id: str = "S-1001", **overrides) -> dict:
    payload = {
        "slotId": slot.id,
        "subjectId": slot.subject_id,
        "studentName": "Ada Lovelace",
        "studentId": student_id,
        "studentEmail": "ada@example.com",
        "customAnswers": {"Topic": "Integrals"},
    }
    payload.update(overrides)
    return payload
