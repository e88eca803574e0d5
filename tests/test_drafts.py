# tests/test_drafts.py
import threading
from datetime import timedelta

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from medmitra_portal.database import SessionLocal, utcnow
from medmitra_portal.models import EncounterDraft, Portal
from medmitra_portal.services import drafts, sessions


@pytest.fixture
def scheduler():
    s = BackgroundScheduler(timezone="Asia/Kolkata")
    s.start()
    yield s
    s.shutdown(wait=False)


def _rows():
    db = SessionLocal()
    try:
        return db.query(EncounterDraft).count()
    finally:
        db.close()


def test_save_load_discard(make_session):
    tokens = make_session(Portal.doctor)
    drafts.save_now(tokens.session_id, "enc-1", {"chiefComplaint": "Cough"})

    draft = drafts.load(tokens.session_id, "enc-1")
    assert draft.payload == {"chiefComplaint": "Cough"}
    assert draft.pending is False and draft.saved_at is not None

    drafts.save_now(tokens.session_id, "enc-1", {"chiefComplaint": "Cough, fever"})
    assert drafts.load(tokens.session_id, "enc-1").payload["chiefComplaint"] == "Cough, fever"
    assert _rows() == 1

    drafts.discard(tokens.session_id, "enc-1")
    assert drafts.load(tokens.session_id, "enc-1") is None


def test_drafts_are_private_to_a_session(make_session):
    mine, theirs = make_session(Portal.doctor), make_session(Portal.doctor)
    drafts.save_now(mine.session_id, "enc-1", {"notes": "mine"})
    assert drafts.load(theirs.session_id, "enc-1") is None


def test_without_scheduler_saves_right_away(make_session):
    tokens = make_session(Portal.doctor)
    assert drafts.schedule_save(tokens.session_id, "enc-1", {"advice": "rest"}) is False
    assert _rows() == 1


def test_rapid_saves_are_coalesced(make_session, scheduler):
    tokens = make_session(Portal.doctor)
    for i in range(5):
        assert drafts.schedule_save(tokens.session_id, "enc-1", {"notes": f"v{i}"}, scheduler) is True

    jobs = [j for j in scheduler.get_jobs() if j.id.startswith("draft:")]
    assert len(jobs) == 1
    assert _rows() == 0
    pending = drafts.load(tokens.session_id, "enc-1")
    assert pending.pending and pending.payload == {"notes": "v4"}

    assert drafts.flush_pending(scheduler) == 1
    assert _rows() == 1
    assert drafts.load(tokens.session_id, "enc-1").payload == {"notes": "v4"}
    assert scheduler.get_job(jobs[0].id) is None


def test_discard_cancels_pending_save(make_session, scheduler):
    tokens = make_session(Portal.doctor)
    drafts.schedule_save(tokens.session_id, "enc-1", {"notes": "x"}, scheduler)
    drafts.discard(tokens.session_id, "enc-1", scheduler)
    assert drafts.flush_pending(scheduler) == 0
    assert drafts.load(tokens.session_id, "enc-1") is None


def test_discard_waits_for_a_save_already_in_flight(make_session, monkeypatch):
    tokens = make_session(Portal.doctor)
    started, release = threading.Event(), threading.Event()
    real_save = drafts.save_now

    def slow_save(session_id, encounter_id, payload):
        started.set()
        release.wait(5)
        return real_save(session_id, encounter_id, payload)

    monkeypatch.setattr(drafts, "save_now", slow_save)
    drafts._PENDING[(tokens.session_id, "enc-1")] = {"notes": "typing"}

    writer = threading.Thread(target=drafts._write_pending, args=(tokens.session_id, "enc-1"))
    writer.start()
    assert started.wait(5)

    finalizer = threading.Thread(target=drafts.discard, args=(tokens.session_id, "enc-1"))
    finalizer.start()
    finalizer.join(0.2)
    release.set()
    writer.join(5)
    finalizer.join(5)

    assert drafts.load(tokens.session_id, "enc-1") is None
    assert _rows() == 0


def test_drafts_go_with_their_session(make_session):
    tokens = make_session(Portal.doctor)
    drafts.save_now(tokens.session_id, "enc-1", {"notes": "x"})
    sessions.delete_session(tokens.session_id)
    assert _rows() == 0
    assert drafts.save_now(tokens.session_id, "enc-1", {"notes": "late"}) is None


def test_purge_stale(make_session):
    tokens = make_session(Portal.doctor)
    drafts.save_now(tokens.session_id, "old", {})
    drafts.save_now(tokens.session_id, "fresh", {})
    db = SessionLocal()
    try:
        row = db.query(EncounterDraft).filter(EncounterDraft.encounter_id == "old").one()
        row.saved_at = utcnow() - timedelta(hours=100)
        db.commit()
    finally:
        db.close()

    assert drafts.purge_stale() == 1
    assert drafts.load(tokens.session_id, "fresh") is not None
    assert drafts.load(tokens.session_id, "old") is None


def test_expired_sessions_are_purged(make_session):
    tokens = make_session(Portal.patient)
    later = utcnow() + timedelta(days=30)
    assert sessions.purge_expired(now=later) == 1
    assert sessions.SessionTokens.load(tokens.session_id) is None
