"""Tests for the Resend transport and best-effort delivery wrapper."""
import httpx
import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from app.config import get_settings
from app.errors import NotificationError
from app.notifications.email_sender import send_email
from app.notifications.service import send_onboarding_approved


def _mock_client(response=None, error=None):
    client = MagicMock()
    client.post = AsyncMock(return_value=response, side_effect=error)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "resend_api_key", "")
        with pytest.raises(NotificationError):
            await send_email("a@example.com", "Hi", "<p>hi</p>")

    @pytest.mark.asyncio
    async def test_success_returns_id(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "resend_api_key", "re_test")
        response = httpx.Response(200, json={"id": "msg_123"})
        client = _mock_client(response=response)

        with patch("app.notifications.email_sender.httpx.AsyncClient", return_value=client):
            message_id = await send_email("a@example.com", "Hi", "<p>hi</p>")

        assert message_id == "msg_123"
        kwargs = client.post.await_args.kwargs
        assert kwargs["json"]["to"] == ["a@example.com"]
        assert kwargs["headers"]["Authorization"] == "Bearer re_test"
        assert kwargs["timeout"] == get_settings().email_timeout_seconds

    @pytest.mark.asyncio
    async def test_api_error(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "resend_api_key", "re_test")
        client = _mock_client(response=httpx.Response(422, text="invalid from address"))

        with patch("app.notifications.email_sender.httpx.AsyncClient", return_value=client):
            with pytest.raises(NotificationError) as exc_info:
                await send_email("a@example.com", "Hi", "<p>hi</p>")
        assert "422" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "resend_api_key", "re_test")
        client = _mock_client(error=httpx.ReadTimeout("slow"))

        with patch("app.notifications.email_sender.httpx.AsyncClient", return_value=client):
            with pytest.raises(NotificationError) as exc_info:
                await send_email("a@example.com", "Hi", "<p>hi</p>")
        assert "timeout" in exc_info.value.message


class TestBestEffortDelivery:
    @pytest.mark.asyncio
    @patch("app.notifications.service.send_email", new_callable=AsyncMock)
    async def test_failure_returns_false(self, mock_send):
        mock_send.side_effect = NotificationError("down")
        sent = await send_onboarding_approved({"id": "c1", "email": "c@example.com", "full_name": "Cee"})
        assert sent is False

    @pytest.mark.asyncio
    @patch("app.notifications.service.send_email", new_callable=AsyncMock)
    async def test_success_returns_true(self, mock_send):
        sent = await send_onboarding_approved({"id": "c1", "email": "c@example.com", "full_name": None})
        assert sent is True
        assert "Hi there" in mock_send.await_args.kwargs["html"]
