"""
Integration Tests for API Endpoints
Tests the complete API flow: directory, templates, e-cards, blasts, history
"""
import csv
import io
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from httpx import AsyncClient
from faker import Faker

from blastdesk.core.rate_limiter import limiter, UNSUBSCRIBE_LIMIT
from blastdesk.models import BlastHistory, UnsubscribedEmail

fake = Faker()

SEND_PATH = "blastdesk.services.blast_service.email_service.send_blast_email"
SEND_CODE_PATH = "blastdesk.services.verification_service.email_service.send_verification_code"


@pytest.fixture
def live_limiter():
    """Rate limiter switched on for one test"""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


def blast_payload(**overrides) -> dict:
    payload = {
        "templateId": "tpl-welcome",
        "recipientIds": ["p1", "p2"],
        "senderProfile": {"name": "Events Team", "email": "events@example.com", "verified": True},
        "blastDetails": {"templateName": "Welcome Email", "subject": "Hello", "departmentName": "Engineering"},
        "globalHeader": "",
        "globalFooter": "",
    }
    payload.update(overrides)
    return payload


class TestHealth:

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get('/')

        assert response.status_code == 200
        assert response.json() == {"message": "Backend server is running"}

    @pytest.mark.asyncio
    async def test_health_endpoints(self, client: AsyncClient):
        assert (await client.get('/health')).json()["status"] == "healthy"
        assert (await client.get('/api/health')).json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_header(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.headers.get("X-Request-ID")


class TestDepartmentEndpoints:

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, auth_headers):
        created = await client.post('/api/departments', json={"id": "d1", "name": " Marketing "}, headers=auth_headers)
        assert created.status_code == 200
        assert created.json() == {"id": "d1", "name": "Marketing"}

        duplicate = await client.post('/api/departments', json={"id": "d1", "name": "Other"}, headers=auth_headers)
        assert duplicate.status_code == 400

        updated = await client.put('/api/departments/d1', json={"name": "Brand"}, headers=auth_headers)
        assert updated.json()["name"] == "Brand"

        listing = await client.get('/api/departments', headers=auth_headers)
        assert [d["name"] for d in listing.json()] == ["Brand"]

        deleted = await client.delete('/api/departments/d1', headers=auth_headers)
        assert deleted.json() == {"deletedID": "d1"}

        missing = await client.delete('/api/departments/d1', headers=auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_generated_id(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/departments', json={"name": "Sales"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"]

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get('/api/departments')

        assert response.status_code == 401


class TestParticipantEndpoints:

    @pytest.mark.asyncio
    async def test_create_update_delete(self, client: AsyncClient, auth_headers, department):
        created = await client.post('/api/participants', json={
            "name": "Grace Hopper",
            "email": "grace@example.com",
            "role": "Admiral",
            "departmentId": department.id,
            "paEmail": "",
        }, headers=auth_headers)
        assert created.status_code == 200
        data = created.json()
        assert data["departmentId"] == department.id
        assert data["paEmail"] is None

        updated = await client.put(f'/api/participants/{data["id"]}', json={
            "name": "Grace Hopper",
            "email": "grace@navy.example",
            "role": "Rear Admiral",
            "departmentId": department.id,
        }, headers=auth_headers)
        assert updated.json()["role"] == "Rear Admiral"

        deleted = await client.delete(f'/api/participants/{data["id"]}', headers=auth_headers)
        assert deleted.json() == {"deletedID": data["id"]}

    @pytest.mark.asyncio
    async def test_unknown_department(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/participants', json={
            "name": "Nobody", "departmentId": "missing"
        }, headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_filters(self, client: AsyncClient, auth_headers, participants):
        everyone = await client.get('/api/participants', headers=auth_headers)
        assert len(everyone.json()) == 3

        by_search = await client.get('/api/participants', params={"search": "turing"}, headers=auth_headers)
        assert [p["id"] for p in by_search.json()] == ["p2"]

        by_department = await client.get('/api/participants', params={"departmentId": "other"}, headers=auth_headers)
        assert by_department.json() == []

    @pytest.mark.asyncio
    async def test_import_and_export(self, client: AsyncClient, auth_headers, department):
        content = (
            "name,email,role,departmentName\n"
            "Ada,ada@example.com,Engineer,engineering\n"
            "Bad,bad@example.com,,Unknown\n"
        ).encode()

        imported = await client.post(
            '/api/participants/import',
            files={"file": ("people.csv", content, "text/csv")},
            headers=auth_headers
        )
        assert imported.status_code == 200
        body = imported.json()
        assert body["imported"] == 1
        assert body["skipped"] == 1
        assert body["participants"][0]["id"].startswith("p_")

        exported = await client.get('/api/participants/export', headers=auth_headers)
        assert exported.headers["content-type"].startswith("text/csv")
        rows = list(csv.reader(io.StringIO(exported.text)))
        assert rows[1][:4] == ["Ada", "ada@example.com", "Engineer", "Engineering"]

    @pytest.mark.asyncio
    async def test_import_rejects_bad_header(self, client: AsyncClient, auth_headers):
        response = await client.post(
            '/api/participants/import',
            files={"file": ("people.csv", b"foo,bar\n1,2\n", "text/csv")},
            headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestTemplateEndpoints:

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, auth_headers):
        created = await client.post('/api/templates', json={
            "id": "t1",
            "name": "Gala",
            "subject": "Join us",
            "body": "<p>Hi {name}</p>",
            "nameX": 10, "nameY": 20, "nameFontSize": 30, "nameColor": "#ffffff",
        }, headers=auth_headers)
        assert created.status_code == 200
        assert created.json()["nameFontSize"] == 30

        updated = await client.put('/api/templates/t1', json={
            "name": "Gala 2024", "subject": "Join us", "body": "<p>Hi</p>"
        }, headers=auth_headers)
        assert updated.json()["name"] == "Gala 2024"
        assert updated.json()["nameFontSize"] is None

        listing = await client.get('/api/templates', headers=auth_headers)
        assert [t["id"] for t in listing.json()] == ["t1"]

        assert (await client.delete('/api/templates/t1', headers=auth_headers)).json() == {"deletedID": "t1"}
        missing = await client.put('/api/templates/t1', json={"name": "x"}, headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["error"] == "Template not found"

    @pytest.mark.asyncio
    async def test_invalid_color_rejected(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/templates', json={"name": "Bad", "nameColor": "red"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestBackdropEndpoints:

    @pytest.mark.asyncio
    async def test_upload_list_and_serve(self, client: AsyncClient, auth_headers, make_png):
        folder = await client.post(
            '/api/ecard-backdrops/folders', json={"folderName": "events"}, headers=auth_headers
        )
        assert folder.status_code == 200

        content = make_png()
        upload = await client.post(
            '/api/upload-ecard-backdrop',
            params={"path": "/events"},
            files={"ecardBackdrop": ("gala.png", content, "image/png")},
            headers=auth_headers
        )
        assert upload.status_code == 200
        file_path = upload.json()["filePath"]
        assert file_path == "uploads/events/gala.png"

        listing = await client.get('/api/ecard-backdrops', params={"path": "/events"}, headers=auth_headers)
        assert listing.json() == {"files": ["gala.png"], "folders": []}

        served = await client.get(f'/api/ecard-backdrop/{file_path}')
        assert served.status_code == 200
        assert served.content == content

    @pytest.mark.asyncio
    async def test_rejects_bad_extension(self, client: AsyncClient, auth_headers):
        response = await client.post(
            '/api/upload-ecard-backdrop',
            files={"ecardBackdrop": ("evil.exe", b"MZ", "application/octet-stream")},
            headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"

    @pytest.mark.asyncio
    async def test_upload_requires_file(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/upload-ecard-backdrop', headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded."

    @pytest.mark.asyncio
    async def test_missing_file(self, client: AsyncClient):
        response = await client.get('/api/ecard-backdrop/uploads/nothing.png')

        assert response.status_code == 404


class TestEcardPreview:

    @pytest.mark.asyncio
    async def test_preview_from_template(self, client: AsyncClient, auth_headers, ecard_template):
        pdf = await client.post('/api/ecard/preview', json={
            "templateId": ecard_template.id, "name": "Ada", "role": "Engineer"
        }, headers=auth_headers)
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert pdf.content.startswith(b"%PDF")

        png = await client.post('/api/ecard/preview', json={
            "templateId": ecard_template.id, "format": "png"
        }, headers=auth_headers)
        assert png.headers["content-type"] == "image/png"
        assert png.content.startswith(b"\x89PNG")

    @pytest.mark.asyncio
    async def test_preview_from_layout(self, client: AsyncClient, auth_headers, ecard_template):
        response = await client.post('/api/ecard/preview', json={
            "ecardBackdropPath": ecard_template.ecard_backdrop_path,
            "nameX": 5, "nameY": 5, "nameFontSize": 12, "nameColor": "#ff0000",
        }, headers=auth_headers)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_preview_requires_backdrop(self, client: AsyncClient, auth_headers, template):
        response = await client.post('/api/ecard/preview', json={"templateId": template.id}, headers=auth_headers)

        assert response.status_code == 400


class TestBlastEndpoints:

    @pytest.mark.asyncio
    async def test_immediate_blast(self, client: AsyncClient, auth_headers, template, participants):
        with patch(SEND_PATH, new_callable=AsyncMock, return_value=True) as send:
            response = await client.post('/api/blast', json=blast_payload(), headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Email blast sent successfully"
        history = body["history"]
        assert history["id"].startswith("hist_")
        assert history["status"] == "Completed"
        assert history["recipientCount"] == 2
        assert history["deliveryRate"] == 100.0
        assert history["senderName"] == "Events Team"
        assert {a["status"] for a in history["detailedRecipientActivity"]} == {"Sent"}
        assert "http://test/api/unsubscribe?email=" in send.await_args_list[0].kwargs["html_content"]

    @pytest.mark.asyncio
    async def test_failed_blast_message(self, client: AsyncClient, auth_headers, template, participants):
        with patch(SEND_PATH, new_callable=AsyncMock, return_value=False):
            response = await client.post('/api/blast', json=blast_payload(), headers=auth_headers)

        assert response.json()["message"] == "Email blast failed: no emails could be delivered"
        assert response.json()["history"]["status"] == "Failed"

    @pytest.mark.asyncio
    async def test_validation_errors(self, client: AsyncClient, auth_headers, template, participants):
        missing = await client.post('/api/blast', json={"templateId": "tpl-welcome"}, headers=auth_headers)
        assert missing.status_code == 400
        assert missing.json()["error"] == "templateId, recipientIds, and senderProfile are required"

        unverified = await client.post('/api/blast', json=blast_payload(
            senderProfile={"name": "x", "email": "x@example.com", "verified": False}
        ), headers=auth_headers)
        assert unverified.json()["error"] == "Sender email is not verified"

        unknown = await client.post('/api/blast', json=blast_payload(templateId="nope"), headers=auth_headers)
        assert unknown.status_code == 404

    @pytest.mark.asyncio
    async def test_schedule_dispatch_and_cancel(self, client: AsyncClient, auth_headers, template, participants):
        when = (datetime.now(timezone.utc) + timedelta(hours=2)).isoformat()

        with patch(SEND_PATH, new_callable=AsyncMock, return_value=True) as send:
            first = await client.post('/api/blast', json=blast_payload(scheduledDate=when), headers=auth_headers)
            second = await client.post('/api/blast', json=blast_payload(scheduledDate=when), headers=auth_headers)
            assert send.await_count == 0

            assert first.json()["message"] == "Email blast scheduled successfully"
            first_id = first.json()["history"]["id"]
            second_id = second.json()["history"]["id"]
            assert first_id != second_id

            dispatched = await client.post(f'/api/history/{first_id}/dispatch', headers=auth_headers)
            assert dispatched.status_code == 200
            assert dispatched.json()["status"] == "Completed"
            assert send.await_count == 2

        again = await client.post(f'/api/history/{first_id}/dispatch', headers=auth_headers)
        assert again.status_code == 400

        cannot_cancel = await client.delete(f'/api/history/{first_id}', headers=auth_headers)
        assert cannot_cancel.status_code == 400

        cancelled = await client.delete(f'/api/history/{second_id}', headers=auth_headers)
        assert cancelled.json() == {"deletedID": second_id}

        listing = await client.get('/api/history', headers=auth_headers)
        assert [h["id"] for h in listing.json()] == [first_id]

    @pytest.mark.asyncio
    async def test_unsubscribed_recipient_skipped(self, client: AsyncClient, auth_headers, template, participants):
        await client.post('/api/unsubscribe', json={"email": "ADA@example.com"})

        with patch(SEND_PATH, new_callable=AsyncMock, return_value=True) as send:
            response = await client.post('/api/blast', json=blast_payload(), headers=auth_headers)

        assert send.await_count == 1
        statuses = {a["participantId"]: a["status"] for a in response.json()["history"]["detailedRecipientActivity"]}
        assert statuses["p1"] == "Unsubscribed"


class TestHistoryEndpoints:

    @pytest.fixture
    async def history_item(self, db_session) -> BlastHistory:
        item = BlastHistory(
            id="hist_1700000000000",
            template_id="tpl-welcome",
            template_name="Spring Gala",
            subject="Hello",
            recipient_group="Engineering",
            recipient_count=2,
            sender_name="Events Team",
            status="Completed",
            sent_date=datetime(2024, 3, 1, 10, 0),
            delivery_rate=50.0,
            body="<p>Hello</p>",
            recipient_ids=["p1", "p2"],
            detailed_recipient_activity=[
                {"participantId": "p1", "name": "Ada", "email": "ada@example.com", "status": "Sent"},
                {"participantId": "p2", "name": "Alan", "email": "alan@example.com", "status": "Bounced"},
            ],
        )
        db_session.add(item)
        await db_session.commit()
        return item

    @pytest.mark.asyncio
    async def test_report(self, client: AsyncClient, auth_headers, history_item):
        response = await client.get(f'/api/history/{history_item.id}/report', headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="Report_Spring_Gala.pdf"' in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_report_missing(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/history/nope/report', headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_export(self, client: AsyncClient, auth_headers, history_item):
        response = await client.get('/api/history/export', headers=auth_headers)

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[1][0] == history_item.id

    @pytest.mark.asyncio
    async def test_reset_requires_super_admin(self, client: AsyncClient, auth_headers, admin_auth_headers, history_item):
        forbidden = await client.delete('/api/history/reset', headers=auth_headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["error"] == "Forbidden: Only Super Admins can perform this action."

        reset = await client.delete('/api/history/reset', headers=admin_auth_headers)
        assert reset.json() == {"message": "Blast history has been successfully reset."}
        assert (await client.get('/api/history', headers=auth_headers)).json() == []

    @pytest.mark.asyncio
    async def test_analytics_and_dashboard(self, client: AsyncClient, auth_headers, history_item, participants, template):
        analytics = (await client.get('/api/analytics', headers=auth_headers)).json()
        assert analytics["totalCampaigns"] == 1
        assert analytics["totalEmailsSent"] == 2
        assert analytics["topCampaigns"][0]["templateName"] == "Spring Gala"

        dashboard = (await client.get('/api/dashboard', headers=auth_headers)).json()
        assert dashboard["participants"] == 3
        assert dashboard["departments"] == 1
        assert dashboard["templates"] == 1
        assert dashboard["completedCampaigns"] == 1
        assert dashboard["scheduledCampaigns"] == 0
        assert dashboard["recentHistory"][0]["id"] == history_item.id


class TestSettingsEndpoints:

    @pytest.mark.asyncio
    async def test_user_settings(self, client: AsyncClient, auth_headers, test_user):
        empty = await client.get('/api/user/settings', headers=auth_headers)
        assert empty.json() == {"globalHeader": "", "globalFooter": "", "userId": test_user.id}

        saved = await client.put('/api/user/settings', json={"globalHeader": "<b>Hi</b>"}, headers=auth_headers)
        assert saved.json()["globalHeader"] == "<b>Hi</b>"
        assert saved.json()["globalFooter"] == ""

    @pytest.mark.asyncio
    async def test_global_settings_used_by_blast(self, client: AsyncClient, auth_headers, template, participants):
        saved = await client.put('/api/global-settings', json={
            "globalHeader": "<div>TOP</div>", "globalFooter": "<div>BOTTOM</div>"
        }, headers=auth_headers)
        assert saved.status_code == 200
        assert (await client.get('/api/global-settings', headers=auth_headers)).json()["globalHeader"] == "<div>TOP</div>"

        payload = blast_payload()
        del payload["globalHeader"]
        del payload["globalFooter"]
        with patch(SEND_PATH, new_callable=AsyncMock, return_value=True) as send:
            await client.post('/api/blast', json=payload, headers=auth_headers)

        html = send.await_args_list[0].kwargs["html_content"]
        assert html.startswith("<div>TOP</div>")
        assert html.endswith("<div>BOTTOM</div>")


class TestUnsubscribeEndpoints:

    @pytest.mark.asyncio
    async def test_post_is_idempotent(self, client: AsyncClient, db_session):
        for _ in range(2):
            response = await client.post('/api/unsubscribe', json={"email": "Ada@Example.com "})
            assert response.json() == {"message": "Email unsubscribed successfully"}

        assert await db_session.get(UnsubscribedEmail, "ada@example.com") is not None

    @pytest.mark.asyncio
    async def test_link_returns_page(self, client: AsyncClient):
        response = await client.get('/api/unsubscribe', params={"email": "alan@example.com"})

        assert response.status_code == 200
        assert "alan@example.com" in response.text

    @pytest.mark.asyncio
    async def test_email_required(self, client: AsyncClient):
        response = await client.post('/api/unsubscribe', json={})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_link_is_rate_limited(self, client: AsyncClient, live_limiter):
        allowed = int(UNSUBSCRIBE_LIMIT.split("/")[0])

        for _ in range(allowed):
            response = await client.get('/api/unsubscribe', params={"email": "alan@example.com"})
            assert response.status_code == 200

        blocked = await client.get('/api/unsubscribe', params={"email": "alan@example.com"})
        assert blocked.status_code == 429
        assert blocked.json()["code"] == "RATE_LIMIT_EXCEEDED"


class TestVerificationEndpoints:

    @pytest.mark.asyncio
    async def test_send_and_verify(self, client: AsyncClient):
        with patch(SEND_CODE_PATH, new_callable=AsyncMock, return_value=True) as send:
            sent = await client.post('/api/send-verification-code', json={"email": "sender@example.com"})

        assert sent.status_code == 200
        code = send.await_args.args[1]

        wrong = await client.post('/api/verify-code', json={"email": "sender@example.com", "code": "000000" if code != "000000" else "111111"})
        assert wrong.status_code == 400
        assert wrong.json()["error"] == "Invalid verification code"

        verified = await client.post('/api/verify-code', json={"email": "sender@example.com", "code": code})
        assert verified.json() == {"message": "Email verified successfully"}

        reused = await client.post('/api/verify-code', json={"email": "sender@example.com", "code": code})
        assert reused.json()["error"] == "No verification code found for this email"

    @pytest.mark.asyncio
    async def test_send_failure(self, client: AsyncClient):
        with patch(SEND_CODE_PATH, new_callable=AsyncMock, return_value=False):
            response = await client.post('/api/send-verification-code', json={"email": "sender@example.com"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to send verification code"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient):
        assert (await client.post('/api/send-verification-code', json={})).json()["error"] == "Email is required"
        assert (await client.post('/api/verify-code', json={"email": "a@b.c"})).json()["error"] == "Email and code are required"


class TestUsersAndActivity:

    @pytest.mark.asyncio
    async def test_list_users_hides_passwords(self, client: AsyncClient, auth_headers, test_user):
        response = await client.get('/api/users', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()[0]["username"] == test_user.username
        assert "hashedPassword" not in response.json()[0]

    @pytest.mark.asyncio
    async def test_delete_user_rules(self, client: AsyncClient, auth_headers, admin_auth_headers, test_user, super_admin):
        forbidden = await client.delete(f'/api/users/{super_admin.id}', headers=auth_headers)
        assert forbidden.status_code == 403

        self_delete = await client.delete(f'/api/users/{super_admin.id}', headers=admin_auth_headers)
        assert self_delete.status_code == 400

        deleted = await client.delete(f'/api/users/{test_user.id}', headers=admin_auth_headers)
        assert deleted.json() == {"deletedID": test_user.id}

        missing = await client.delete(f'/api/users/{test_user.id}', headers=admin_auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_activity_log_records_actions(self, client: AsyncClient, auth_headers, test_user):
        await client.post('/api/departments', json={"id": "d1", "name": "Ops"}, headers=auth_headers)
        await client.delete('/api/departments/d1', headers=auth_headers)

        response = await client.get('/api/activity-logs', headers=auth_headers)
        logs = response.json()

        assert [log["action"] for log in logs[:2]] == ["Department Deletion", "Department Creation"]
        assert all(log["user"] == test_user.username for log in logs[:2])

        limited = await client.get('/api/activity-logs', params={"limit": 1}, headers=auth_headers)
        assert len(limited.json()) == 1
