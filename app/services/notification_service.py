"""
NOTIFICATION SERVICE

Delivers a generated order sheet over the plan's channels (EMAIL, TELEGRAM).
Delivery failures are reported in the result and logged, never raised.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import List, Optional

import httpx

from app.config import settings
from app.domain.models import Execution, NotificationChannel, NotificationResult, Plan
from app.infrastructure.db.repositories.notification_log_repository import NotificationLogRepository

_logger = logging.getLogger(__name__)


def build_subject(execution: Execution) -> str:
    return f"[DCA] {execution.year_month} cycle {execution.cycle_index} order sheet"


def build_text(execution: Execution, app_url: str = settings.APP_URL) -> str:
    lines = [
        f"{execution.year_month} cycle {execution.cycle_index} order sheet",
        f"As of: {execution.as_of_date.date().isoformat()}",
        "",
        f"Cycle budget: {execution.cycle_budget:,.0f} {settings.BASE_CURRENCY}",
        "",
        "Orders:",
    ]
    for item in execution.items:
        lines.append(
            f"  {item.name} ({item.ticker}): {item.shares} shares "
            f"@ {item.price:,.2f} = {item.est_cost:,.0f}"
        )
    lines += [
        "",
        f"Estimated total: {execution.total_est_cost:,.0f}",
        f"Carried to next cycle: {execution.total_carry_out:,.0f}",
        "",
        f"Review: {app_url}/execution/{execution.ym_cycle}",
    ]
    return "\n".join(lines)


class ExecutionNotifier:
    """Sends order sheets; optionally records each attempt in the notification log."""

    def __init__(self, log_repo: Optional[NotificationLogRepository] = None):
        self.log_repo = log_repo

    async def send(self, plan: Plan, execution: Execution) -> NotificationResult:
        results: List[NotificationResult] = []
        for channel in plan.notification_channels:
            if channel == NotificationChannel.EMAIL:
                result = await self.send_email(plan.email, execution)
                recipient = plan.email
            else:
                result = await self.send_telegram(plan.telegram_chat_id, execution)
                recipient = plan.telegram_chat_id or ""
            results.append(result)
            await self._log(execution, result, recipient)

        if not results:
            return NotificationResult(success=True, channel=NotificationChannel.EMAIL)
        failed = [r for r in results if not r.success]
        return failed[0] if failed else results[0]

    async def send_email(self, email: str, execution: Execution) -> NotificationResult:
        if not settings.SMTP_HOST or not settings.SMTP_FROM_EMAIL:
            _logger.info("Email skipped (missing SMTP_HOST or SMTP_FROM_EMAIL)")
            return NotificationResult(
                success=False,
                channel=NotificationChannel.EMAIL,
                error="SMTP not configured",
            )

        message = EmailMessage()
        message["Subject"] = build_subject(execution)
        message["From"] = settings.SMTP_FROM_EMAIL
        message["To"] = email
        message.set_content(build_text(execution))

        try:
            await asyncio.to_thread(self._smtp_send, message)
        except (smtplib.SMTPException, OSError) as exc:
            _logger.error("Email notification failed | %s | %s", execution.ym_cycle, exc)
            return NotificationResult(success=False, channel=NotificationChannel.EMAIL, error=str(exc))
        return NotificationResult(success=True, channel=NotificationChannel.EMAIL)

    @staticmethod
    def _smtp_send(message: EmailMessage) -> None:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15) as smtp:
            smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(message)

    async def send_telegram(self, chat_id: Optional[str], execution: Execution) -> NotificationResult:
        token = settings.TELEGRAM_BOT_TOKEN
        if not settings.TELEGRAM_ENABLED or not token or not chat_id:
            _logger.info("Telegram alert skipped (disabled or missing TELEGRAM_BOT_TOKEN / chat id)")
            return NotificationResult(
                success=False,
                channel=NotificationChannel.TELEGRAM,
                error="Telegram not configured",
            )

        url = f"https://api.telegram.org/bot{token}/sendMessage"
        payload = {"chat_id": chat_id, "text": build_text(execution)}
        try:
            async with httpx.AsyncClient(timeout=15.0) as client:
                resp = await client.post(url, json=payload)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            _logger.error("Telegram alert failed: %s", exc)
            return NotificationResult(success=False, channel=NotificationChannel.TELEGRAM, error=str(exc))
        return NotificationResult(success=True, channel=NotificationChannel.TELEGRAM)

    async def _log(self, execution: Execution, result: NotificationResult, recipient: str) -> None:
        if self.log_repo is None:
            return
        await self.log_repo.create(
            user_id=execution.user_id,
            execution_key=execution.ym_cycle,
            channel=result.channel.value,
            recipient=recipient,
            success=result.success,
            error_message=result.error,
        )
