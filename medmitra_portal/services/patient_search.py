# medmitra_portal/services/patient_search.py
"""Search boxes shared by the doctor and coordinator portals."""
from __future__ import annotations
import logging
from typing import Optional

from ..backend import coordinators, doctors, encounters
from ..backend.client import BackendClient

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MIN_MID_QUERY_LENGTH = 3


def _usable(query: Optional[str], minimum: int) -> Optional[str]:
    q = (query or "").strip()
    return q if len(q) >= minimum else None


def coordinator_search(client: BackendClient, query: Optional[str], search_by: str = "all") -> list:
    q = _usable(query, MIN_QUERY_LENGTH)
    if q is None:
        return []
    return coordinators.search_patients(client, q, search_by)


def doctor_search(client: BackendClient, query: Optional[str], page: int = 1, limit: int = 20) -> dict:
    q = _usable(query, MIN_QUERY_LENGTH)
    if q is None:
        return {"patients": [], "total": 0}
    return doctors.search_patients(client, q, page, limit)


def global_search(client: BackendClient, query: Optional[str], page: int = 1, limit: int = 20) -> dict:
    """MID registry lookup across hospitals."""
    q = _usable(query, MIN_MID_QUERY_LENGTH)
    if q is None:
        return {"patients": [], "total": 0}
    return doctors.search_global_patients(client, q, page, limit)


def enroll(client: BackendClient, global_patient_id: str) -> dict:
    result = doctors.enroll_global_patient(client, global_patient_id)
    logger.info("Enrolled global patient %s", global_patient_id)
    return result


def registry_record(client: BackendClient, mid: str) -> dict:
    return {
        "patient": doctors.get_global_patient(client, mid),
        "network": doctors.get_network_status(client, mid),
    }


def history(client: BackendClient, global_patient_id: str, hospital_id: str) -> dict:
    return encounters.unified_history(client, global_patient_id, hospital_id)
