# medmitra_portal/services/triage.py
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Union

from ..forms import TriageForm
from ..schemas import DashboardQueueItem

TRIAGE_STATUSES = ["scheduled", "waiting", "ready", "in-progress", "completed"]


def triage_payload(form: TriageForm) -> Dict[str, Any]:
    """Vitals only if something was measured, payment only if money changed hands."""
    body: Dict[str, Any] = {}
    if not form.vitals.is_empty():
        body["vitals"] = form.vitals.dump()
    if form.payment is not None and form.payment.amount_value() > 0:
        payment = form.payment.dump()
        payment["amount"] = form.payment.amount_value()
        body["payment"] = payment
    return body


def parse_queue(rows: Iterable[dict]) -> List[DashboardQueueItem]:
    return [DashboardQueueItem.model_validate(r) for r in rows or []]


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def queue_stats(queue: Iterable[Union[DashboardQueueItem, dict]]) -> Dict[str, Any]:
    counts = {s: 0 for s in TRIAGE_STATUSES}
    total = 0
    for item in queue:
        status = item.get("triageStatus", "scheduled") if isinstance(item, dict) else item.triage_status
        counts[status if status in counts else "scheduled"] += 1
        total += 1

    ready = counts["ready"]
    if total == 0:
        headline = "No appointments scheduled for today"
    else:
        headline = f"{_plural(total, 'appointment')} • {ready} ready"
    greeting = f"You have {_plural(total, 'appointment')} today."
    if ready:
        greeting += f" {_plural(ready, 'patient')} ready."
    return {"total": total, "byStatus": counts, "headline": headline, "greeting": greeting}
