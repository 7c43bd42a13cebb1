"""
Unit Tests for Email Service
"""
import pytest
from unittest.mock import AsyncMock, patch

from blastdesk.services.email_service import EmailAttachment, EmailService


@pytest.fixture
def service() -> EmailService:
    svc = EmailService()
    svc.verification_user = "verify@example.com"
    svc.verification_password = "secret"
    svc.blast_user = "blast@example.com"
    svc.blast_password = "secret"
    return svc


class TestConfiguration:

    def test_configured_with_credentials(self, service):
        assert service.is_configured is True
        assert service.is_blast_configured is True

    def test_not_configured_without_credentials(self, service):
        service.verification_password = ""
        service.blast_user = ""

        assert service.is_configured is False
        assert service.is_blast_configured is False

    @pytest.mark.asyncio
    async def test_unconfigured_send_skips_smtp(self, service):
        service.blast_password = ""

        with patch("blastdesk.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            ok = await service.send_blast_email("ada@example.com", "Hi", "<p>Hi</p>")

        assert ok is False
        send.assert_not_called()


class TestVerificationTransport:

    @pytest.mark.asyncio
    async def test_send_verification_code(self, service):
        with patch("blastdesk.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            ok = await service.send_verification_code("ada@example.com", "123456")

        assert ok is True
        message = send.call_args.args[0]
        kwargs = send.call_args.kwargs
        assert message["Subject"] == "Your Verification Code"
        assert message["To"] == "ada@example.com"
        assert "verify@example.com" in message["From"]
        assert kwargs["username"] == "verify@example.com"
        assert "123456" in message.as_string()

    @pytest.mark.asyncio
    async def test_smtp_failure_returns_false(self, service):
        with patch(
            "blastdesk.services.email_service.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=OSError("connection refused")
        ):
            ok = await service.send_email("ada@example.com", "Subject", "<p>Body</p>")

        assert ok is False


class TestBlastTransport:

    @pytest.mark.asyncio
    async def test_sender_name_and_blast_credentials(self, service):
        with patch("blastdesk.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            ok = await service.send_blast_email(
                "ada@example.com", "Campaign", "<p>Hello</p>", sender_name="Events Team"
            )

        assert ok is True
        message = send.call_args.args[0]
        assert message["From"] == "Events Team <blast@example.com>"
        assert send.call_args.kwargs["username"] == "blast@example.com"
        assert send.call_args.kwargs["password"] == "secret"

    @pytest.mark.asyncio
    async def test_default_sender_name(self, service):
        service.default_sender_name = "BlastDesk"

        with patch("blastdesk.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            await service.send_blast_email("ada@example.com", "Campaign", "<p>Hello</p>")

        assert send.call_args.args[0]["From"] == "BlastDesk <blast@example.com>"

    @pytest.mark.asyncio
    async def test_attachments_are_added(self, service):
        attachment = EmailAttachment("ecard.pdf", b"%PDF-1.4 fake")

        with patch("blastdesk.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            await service.send_blast_email(
                "ada@example.com", "Campaign", "<p>Hello</p>", attachments=[attachment]
            )

        message = send.call_args.args[0]
        parts = message.get_payload()
        assert len(parts) == 2
        assert parts[0].get_content_type() == "text/html"
        assert parts[1].get_content_type() == "application/pdf"
        assert parts[1].get_filename() == "ecard.pdf"
        assert parts[1].get_payload(decode=True) == b"%PDF-1.4 fake"
