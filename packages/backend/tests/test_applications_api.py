"""Tests for the application workflow: apply, status changes, notes.

Each write must commit first, then schedule at most one email and one
push. Side effects are checked through the recording notifier and the
fake mailer from conftest.
"""

import json

import pytest
import pytest_asyncio

from hireboard.events.types import (
    APPLICATION_NOTE_ADDED,
    APPLICATION_STATUS_UPDATE,
    NEW_APPLICATION,
)
from hireboard.services.application_service import can_transition

from conftest import FakeConnection, FakeMailer, register_user


async def apply(client, job, seeker, **body):
    return await client.post(
        f"/api/v1/jobs/{job['id']}/applications",
        json=body,
        headers=seeker["headers"],
    )


@pytest_asyncio.fixture()
async def application(client, job, seeker):
    resp = await apply(client, job, seeker, cover_letter="Hire me")
    assert resp.status_code == 201, resp.text
    return resp.json()


# ═══════════════════════════════════════════════════════════
# Apply
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_apply_creates_application(client, job, seeker):
    resp = await apply(client, job, seeker, cover_letter="Hire me")
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "Applied"
    assert data["job_id"] == job["id"]
    assert data["applicant_id"] == seeker["id"]
    assert data["cover_letter"] == "Hire me"
    assert data["notes"] == []
    assert data["interviews"] == []


@pytest.mark.asyncio
async def test_apply_bumps_applicant_count(client, job, seeker):
    await apply(client, job, seeker)
    resp = await client.get(f"/api/v1/jobs/{job['id']}")
    assert resp.json()["applicant_count"] == 1


@pytest.mark.asyncio
async def test_apply_pushes_to_online_employer(client, job, employer, seeker, registry, notifier, mailer):
    conn = FakeConnection()
    registry.register(employer["id"], conn)

    resp = await apply(client, job, seeker)
    await notifier.flush()

    assert len(conn.sent) == 1
    frame = json.loads(conn.sent[0])
    assert frame["type"] == NEW_APPLICATION
    assert frame["data"] == {
        "jobId": job["id"],
        "jobTitle": "Backend Engineer",
        "applicantName": "Sam Seeker",
        "applicationId": resp.json()["id"],
    }

    # One email to the employer as well
    to_employer = [m for m in mailer.sent if m[0] == employer["email"]]
    assert len(to_employer) == 2  # welcome + new application
    assert to_employer[-1][1] == "New Application for Backend Engineer"


@pytest.mark.asyncio
async def test_apply_with_employer_offline_still_succeeds(client, job, employer, seeker, notifier):
    resp = await apply(client, job, seeker)
    assert resp.status_code == 201
    assert len(notifier.calls_for(NEW_APPLICATION)) == 1
    assert notifier.calls_for(NEW_APPLICATION)[0][0] == employer["id"]


@pytest.mark.asyncio
async def test_apply_twice_is_rejected(client, job, seeker, notifier):
    first = await apply(client, job, seeker)
    assert first.status_code == 201

    second = await apply(client, job, seeker)
    assert second.status_code == 400
    assert second.json()["detail"] == "You have already applied for this job"

    # No second event and no second counter bump
    assert len(notifier.calls_for(NEW_APPLICATION)) == 1
    resp = await client.get(f"/api/v1/jobs/{job['id']}")
    assert resp.json()["applicant_count"] == 1


@pytest.mark.asyncio
async def test_apply_to_unknown_job_404(client, seeker):
    resp = await client.post(
        "/api/v1/jobs/00000000-0000-0000-0000-000000000000/applications",
        json={},
        headers=seeker["headers"],
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_apply_to_closed_job_404(client, job, employer, seeker):
    await client.delete(f"/api/v1/jobs/{job['id']}", headers=employer["headers"])
    resp = await apply(client, job, seeker)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_employer_cannot_apply(client, job, employer):
    resp = await apply(client, job, employer)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_apply_requires_auth(client, job):
    resp = await client.post(f"/api/v1/jobs/{job['id']}/applications", json={})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_apply_survives_mailer_failure(client, job, seeker, notifier):
    from hireboard.services.email import get_mailer
    from hireboard.main import app

    app.dependency_overrides[get_mailer] = lambda: FakeMailer(fail=True)

    resp = await apply(client, job, seeker)
    assert resp.status_code == 201
    assert len(notifier.calls_for(NEW_APPLICATION)) == 1


# ═══════════════════════════════════════════════════════════
# Status updates
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_status_update_by_owner(client, employer, seeker, application, registry, notifier, mailer):
    conn = FakeConnection()
    registry.register(seeker["id"], conn)
    mails_before = len(mailer.sent)

    resp = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Reviewed"},
        headers=employer["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "Reviewed"

    await notifier.flush()
    (frame,) = [json.loads(m) for m in conn.sent]
    assert frame == {
        "type": APPLICATION_STATUS_UPDATE,
        "data": {
            "jobTitle": "Backend Engineer",
            "status": "Reviewed",
            "applicationId": application["id"],
        },
    }

    new_mail = mailer.sent[mails_before:]
    assert len(new_mail) == 1
    assert new_mail[0][0] == seeker["email"]
    assert new_mail[0][1] == "Application Status: Reviewed"


@pytest.mark.asyncio
async def test_status_update_by_other_employer_forbidden(client, seeker, application, notifier, mailer):
    intruder = await register_user(client, "employer")
    calls_before = len(notifier.calls)
    mails_before = len(mailer.sent)

    resp = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Rejected"},
        headers=intruder["headers"],
    )
    assert resp.status_code == 403

    # Nothing changed, nothing sent
    assert len(notifier.calls) == calls_before
    assert len(mailer.sent) == mails_before
    mine = await client.get("/api/v1/applications", headers=seeker["headers"])
    assert mine.json()["applications"][0]["status"] == "Applied"


@pytest.mark.asyncio
async def test_status_update_by_seeker_forbidden(client, seeker, application):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Offer"},
        headers=seeker["headers"],
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_status_update_unknown_status_422(client, employer, application):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Hired"},
        headers=employer["headers"],
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_status_update_unknown_application_404(client, employer):
    resp = await client.post(
        "/api/v1/applications/00000000-0000-0000-0000-000000000000/status",
        json={"status": "Reviewed"},
        headers=employer["headers"],
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_status_update_permissive_by_default(client, employer, application):
    """Out of a terminal state is allowed unless strict mode is on."""
    for status in ("Rejected", "Reviewed"):
        resp = await client.post(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": status},
            headers=employer["headers"],
        )
        assert resp.status_code == 200
    assert resp.json()["status"] == "Reviewed"


@pytest.mark.asyncio
async def test_status_update_strict_mode_rejects_invalid_move(client, employer, application, monkeypatch, notifier):
    from hireboard.config import settings

    monkeypatch.setattr(settings, "strict_status_transitions", True)

    ok = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Rejected"},
        headers=employer["headers"],
    )
    assert ok.status_code == 200

    resp = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Interview"},
        headers=employer["headers"],
    )
    assert resp.status_code == 409
    assert "terminal" in resp.json()["detail"]
    assert len(notifier.calls_for(APPLICATION_STATUS_UPDATE)) == 1


@pytest.mark.asyncio
async def test_status_update_survives_mailer_failure(client, employer, seeker, application, notifier):
    from hireboard.services.email import get_mailer
    from hireboard.main import app

    failing_mailer = FakeMailer(fail=True)
    app.dependency_overrides[get_mailer] = lambda: failing_mailer

    resp = await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Offer"},
        headers=employer["headers"],
    )
    assert resp.status_code == 200

    stored = await client.get(
        f"/api/v1/applications/{application['id']}", headers=seeker["headers"]
    )
    assert stored.json()["status"] == "Offer"

    updates = notifier.calls_for(APPLICATION_STATUS_UPDATE)
    assert len(updates) == 1
    assert updates[0][0] == seeker["id"]
    assert len(failing_mailer.sent) == 1
    assert failing_mailer.sent[0][0] == seeker["email"]


def test_transition_table():
    assert can_transition("Applied", "Reviewed")
    assert can_transition("Reviewed", "Interview")
    assert can_transition("Interview", "Offer")
    assert not can_transition("Interview", "Applied")
    assert not can_transition("Offer", "Rejected")
    assert not can_transition("Rejected", "Reviewed")


# ═══════════════════════════════════════════════════════════
# Notes, rating, interviews
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_add_note_notifies_employer(client, employer, seeker, application, notifier):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/notes",
        json={"text": "Strong Python background"},
        headers=employer["headers"],
    )
    assert resp.status_code == 200
    notes = resp.json()["notes"]
    assert len(notes) == 1
    assert notes[0]["text"] == "Strong Python background"
    assert notes[0]["author_id"] == employer["id"]

    (call,) = notifier.calls_for(APPLICATION_NOTE_ADDED)
    user_id, _, payload = call
    assert user_id == employer["id"]
    assert payload["applicationId"] == application["id"]
    assert [n["text"] for n in payload["notes"]] == ["Strong Python background"]
    assert not any(c[0] == seeker["id"] for c in notifier.calls_for(APPLICATION_NOTE_ADDED))


@pytest.mark.asyncio
async def test_notes_accumulate(client, employer, application):
    for text in ("first", "second"):
        resp = await client.post(
            f"/api/v1/applications/{application['id']}/notes",
            json={"text": text},
            headers=employer["headers"],
        )
    assert [n["text"] for n in resp.json()["notes"]] == ["first", "second"]


@pytest.mark.asyncio
async def test_add_note_by_other_employer_forbidden(client, application):
    intruder = await register_user(client, "employer")
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/notes",
        json={"text": "sneaky"},
        headers=intruder["headers"],
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_add_empty_note_422(client, employer, application):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/notes",
        json={"text": ""},
        headers=employer["headers"],
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_rate_application(client, employer, application):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/rating",
        json={"rating": 4},
        headers=employer["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["rating"] == 4


@pytest.mark.asyncio
async def test_rating_out_of_range_422(client, employer, application):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/rating",
        json={"rating": 6},
        headers=employer["headers"],
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_record_interview(client, employer, application):
    resp = await client.post(
        f"/api/v1/applications/{application['id']}/interviews",
        json={"date": "2026-11-02T10:00:00Z", "feedback": "Good", "score": 8},
        headers=employer["headers"],
    )
    assert resp.status_code == 201
    (interview,) = resp.json()["interviews"]
    assert interview["feedback"] == "Good"
    assert interview["score"] == 8
    assert interview["interviewer_id"] == employer["id"]


# ═══════════════════════════════════════════════════════════
# Reads
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_my_applications(client, seeker, application):
    resp = await client.get("/api/v1/applications", headers=seeker["headers"])
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["pages"] == 1
    assert data["current_page"] == 1
    assert data["applications"][0]["id"] == application["id"]


@pytest.mark.asyncio
async def test_list_my_applications_status_filter(client, seeker, application):
    resp = await client.get(
        "/api/v1/applications", params={"status": "Offer"}, headers=seeker["headers"]
    )
    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_list_job_applicants(client, job, employer, application):
    resp = await client.get(
        f"/api/v1/jobs/{job['id']}/applications", headers=employer["headers"]
    )
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()["applications"]] == [application["id"]]


@pytest.mark.asyncio
async def test_list_job_applicants_other_employer_forbidden(client, job, application):
    intruder = await register_user(client, "employer")
    resp = await client.get(
        f"/api/v1/jobs/{job['id']}/applications", headers=intruder["headers"]
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_get_application_visible_to_both_parties(client, employer, seeker, application):
    for who in (employer, seeker):
        resp = await client.get(
            f"/api/v1/applications/{application['id']}", headers=who["headers"]
        )
        assert resp.status_code == 200


@pytest.mark.asyncio
async def test_get_application_hidden_from_others(client, application):
    stranger = await register_user(client, "jobSeeker")
    resp = await client.get(
        f"/api/v1/applications/{application['id']}", headers=stranger["headers"]
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_stats(client, employer, application):
    await client.post(
        f"/api/v1/applications/{application['id']}/status",
        json={"status": "Interview"},
        headers=employer["headers"],
    )
    resp = await client.get("/api/v1/applications/stats", headers=employer["headers"])
    assert resp.status_code == 200
    data = resp.json()
    assert data["stats"] == [{"status": "Interview", "count": 1}]
    assert len(data["daily_stats"]) == 1
    assert data["daily_stats"][0]["count"] == 1


@pytest.mark.asyncio
async def test_stats_forbidden_for_seekers(client, seeker):
    resp = await client.get("/api/v1/applications/stats", headers=seeker["headers"])
    assert resp.status_code == 403
