# tests/test_triage.py
from medmitra_portal.forms import TriageForm
from medmitra_portal.services.triage import parse_queue, queue_stats, triage_payload


def _item(status, n):
    return {
        "appointmentId": f"a{n}",
        "scheduledTime": "2026-03-02T10:00:00+05:30",
        "status": "Waiting",
        "triageStatus": status,
        "patient": {"fullName": f"Patient {n}"},
    }


def test_empty_triage_sends_nothing():
    assert triage_payload(TriageForm()) == {}


def test_vitals_only_when_measured():
    body = triage_payload(TriageForm(vitals={"bp": "120/80", "pulse": 72}))
    assert body == {"vitals": {"bp": "120/80", "pulse": 72.0}}


def test_payment_only_when_positive_and_amount_parsed():
    assert triage_payload(TriageForm(payment={"amount": 0})) == {}
    body = triage_payload(TriageForm(payment={"amount": "500.50", "method": "UPI"}))
    assert body["payment"]["amount"] == 500.5
    assert body["payment"]["method"] == "UPI"
    assert body["payment"]["status"] == "paid"
    assert "vitals" not in body


def test_queue_stats_headline():
    queue = parse_queue([_item("ready", 1), _item("waiting", 2), _item("ready", 3)])
    stats = queue_stats(queue)
    assert stats["total"] == 3
    assert stats["byStatus"]["ready"] == 2
    assert stats["byStatus"]["waiting"] == 1
    assert stats["headline"] == "3 appointments • 2 ready"
    assert stats["greeting"] == "You have 3 appointments today. 2 patients ready."


def test_queue_stats_empty_and_singular():
    assert queue_stats([])["headline"] == "No appointments scheduled for today"
    stats = queue_stats([_item("scheduled", 1)])
    assert stats["headline"] == "1 appointment • 0 ready"
    assert stats["greeting"] == "You have 1 appointment today."


def test_unknown_triage_status_counts_as_scheduled():
    queue = parse_queue([_item("no-show", 1), _item(None, 2), _item("ready", 3)])
    assert queue[0].triage_status == "no-show"
    stats = queue_stats(queue)
    assert stats["total"] == 3
    assert stats["byStatus"]["scheduled"] == 2
    assert stats["byStatus"]["ready"] == 1
