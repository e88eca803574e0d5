# medmitra_portal/services/dashboards.py
"""
Landing pages of the three portals, each assembled from several backend
calls.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List

from pydantic import ValidationError

from ..backend import coordinators, doctors, patients
from ..backend.client import BackendClient
from ..exceptions import BackendError, BackendUnavailable, SessionExpired
from .triage import parse_queue, queue_stats

logger = logging.getLogger(__name__)


def doctor_dashboard(client: BackendClient) -> Dict[str, Any]:
    dashboard = doctors.get_dashboard(client)
    rows = dashboard.get("queue")
    if rows is None:
        rows = doctors.get_queue(client)
    queue = parse_queue(rows)
    return {
        "doctor": dashboard.get("doctor") or {},
        "queue": [q.dump() for q in queue],
        "queueStats": queue_stats(queue),
        "actionItems": dashboard.get("actionItems") or {},
        "stats": dashboard.get("stats") or {},
    }


def coordinator_dashboard(client: BackendClient, activity_limit: int = 10) -> Dict[str, Any]:
    return {
        "overview": coordinators.dashboard_overview(client),
        "topStats": coordinators.top_stats(client),
        "recentActivity": coordinators.recent_activity(client, activity_limit),
    }


def _dump(value: Any) -> Any:
    if hasattr(value, "dump"):
        return value.dump()
    return value


def patient_dashboard(client: BackendClient, feed_limit: int = 5) -> Dict[str, Any]:
    """
    Every widget is fetched on its own; a failing widget comes back as None
    with its error listed, the rest of the page still renders.
    An expired session is not a widget failure and propagates.
    """
    widgets: Dict[str, Callable[[], Any]] = {
        "profile": lambda: patients.get_profile(client),
        "nextAppointment": lambda: patients.next_appointment(client),
        "activityFeed": lambda: patients.activity_feed(client, feed_limit),
        "prescriptions": lambda: patients.prescriptions(client),
        "medications": lambda: patients.medications(client),
    }
    out: Dict[str, Any] = {}
    errors: List[Dict[str, str]] = []
    for name, fetch in widgets.items():
        try:
            out[name] = _dump(fetch())
        except SessionExpired:
            raise
        except (BackendError, BackendUnavailable, ValidationError) as e:
            logger.warning("Patient dashboard widget %s failed: %s", name, e)
            out[name] = None
            errors.append({"field": name, "message": getattr(e, "message", None) or str(e)})

    profile = out.get("profile") or {}
    out["needsProfileCompletion"] = bool(profile.get("needsProfileCompletion"))
    out["errors"] = errors
    return out
