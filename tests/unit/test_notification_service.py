from dataclasses import replace
from decimal import Decimal

import pytest

from app.config import settings
from app.domain.models import ExecutionItem, Market, NotificationChannel
from app.services.notification_service import ExecutionNotifier, build_subject, build_text

from fakes import make_execution, make_plan


class RecordingLogRepo:
    def __init__(self):
        self.rows = []

    async def create(self, **kwargs) -> int:
        self.rows.append(kwargs)
        return len(self.rows)


def _execution():
    item = ExecutionItem(
        ticker="069500",
        name="KODEX 200",
        market=Market.KRX,
        price=Decimal("35000"),
        target_weight=Decimal("0.5"),
        target_amount=Decimal("250000"),
        carry_in=Decimal("0"),
        shares=7,
        est_cost=Decimal("245000"),
        carry_out=Decimal("5000"),
    )
    return replace(make_execution("2026-02#1"), items=(item,))


@pytest.fixture()
def smtp_configured(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_FROM_EMAIL", "dca@example.com")


@pytest.fixture()
def smtp_missing(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    monkeypatch.setattr(settings, "SMTP_FROM_EMAIL", None)


def test_message_text_lists_orders():
    execution = _execution()
    text = build_text(execution, app_url="https://dca.example")

    assert build_subject(execution) == "[DCA] 2026-02 cycle 1 order sheet"
    assert "KODEX 200 (069500): 7 shares" in text
    assert "Estimated total: 245,000" in text
    assert "Carried to next cycle: 5,000" in text
    assert "https://dca.example/execution/2026-02#1" in text


async def test_email_without_smtp_settings_fails_softly(smtp_missing):
    result = await ExecutionNotifier().send_email("investor@example.com", _execution())
    assert result.success is False
    assert result.channel == NotificationChannel.EMAIL
    assert result.error == "SMTP not configured"


async def test_email_is_sent_through_smtp(smtp_configured, monkeypatch):
    sent = []
    monkeypatch.setattr(ExecutionNotifier, "_smtp_send", staticmethod(lambda message: sent.append(message)))

    result = await ExecutionNotifier().send_email("investor@example.com", _execution())

    assert result.success is True
    assert sent[0]["To"] == "investor@example.com"
    assert sent[0]["Subject"] == "[DCA] 2026-02 cycle 1 order sheet"


async def test_smtp_error_is_reported(smtp_configured, monkeypatch):
    def refuse(message):
        raise OSError("connection refused")

    monkeypatch.setattr(ExecutionNotifier, "_smtp_send", staticmethod(refuse))
    result = await ExecutionNotifier().send_email("investor@example.com", _execution())
    assert result.success is False
    assert "connection refused" in result.error


async def test_telegram_disabled(monkeypatch):
    monkeypatch.setattr(settings, "TELEGRAM_ENABLED", False)
    result = await ExecutionNotifier().send_telegram("12345", _execution())
    assert result.success is False
    assert result.channel == NotificationChannel.TELEGRAM


async def test_send_logs_every_channel_and_reports_first_failure(smtp_configured, monkeypatch):
    monkeypatch.setattr(ExecutionNotifier, "_smtp_send", staticmethod(lambda message: None))
    monkeypatch.setattr(settings, "TELEGRAM_ENABLED", False)
    log_repo = RecordingLogRepo()
    plan = make_plan(channels=(NotificationChannel.EMAIL, NotificationChannel.TELEGRAM))

    result = await ExecutionNotifier(log_repo).send(plan, _execution())

    assert result.success is False
    assert result.channel == NotificationChannel.TELEGRAM
    assert [(r["channel"], r["success"]) for r in log_repo.rows] == [("EMAIL", True), ("TELEGRAM", False)]
    assert log_repo.rows[0]["execution_key"] == "2026-02#1"


async def test_send_with_no_channels_is_a_no_op():
    result = await ExecutionNotifier().send(make_plan(channels=()), _execution())
    assert result.success is True
