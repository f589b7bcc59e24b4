"""
Owner notifications sent through the Telegram Bot API.

Notifications are best effort: failures are logged and reported as False so a
booking never fails because a message could not be delivered.
"""

import logging
import os
from datetime import datetime
from typing import Optional

import aiohttp

from receptionist.config.constants import HTTP_TIMEOUT, LOGGER_NAME, TELEGRAM_API_URL
from receptionist.models.appointments import Appointment
from receptionist.services.availability import format_slot

logger = logging.getLogger(LOGGER_NAME)


def format_booking_message(appointment: Appointment) -> str:
    when = appointment.appointment_time
    message = (
        "🔔 *New Appointment Booked!*\n\n"
        f"👤 Customer: {appointment.customer_name}\n"
        f"📞 Phone: {appointment.customer_phone}\n"
        f"✂️ Service: {appointment.service}\n"
        f"🕐 Time: {_format_day(when)} at {format_slot(when)}\n"
        f"⏱️ Duration: {appointment.duration_minutes} minutes\n"
    )
    if appointment.notes:
        message += f"\n💬 Notes: {appointment.notes}\n"
    return message + "\n📱 Reply with /confirm or /cancel to manage"


def format_cancellation_message(appointment: Appointment) -> str:
    when = appointment.appointment_time
    return (
        "❌ *Appointment Cancelled*\n\n"
        f"👤 Customer: {appointment.customer_name}\n"
        f"📞 Phone: {appointment.customer_phone}\n"
        f"🕐 Was scheduled for: {_format_day(when)} at {format_slot(when)}"
    )


def _format_day(moment: datetime) -> str:
    return f"{moment:%A, %B} {moment.day}"


class TelegramNotifier:
    """Sends booking events to a business owner's Telegram chat."""

    def __init__(self, bot_token: Optional[str] = None, timeout: float = HTTP_TIMEOUT):
        self.bot_token = bot_token if bot_token is not None else os.getenv("TELEGRAM_BOT_TOKEN")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.bot_token)

    async def notify_booking(self, chat_id: Optional[str], appointment: Appointment) -> bool:
        return await self._send(chat_id, format_booking_message(appointment))

    async def notify_cancellation(self, chat_id: Optional[str], appointment: Appointment) -> bool:
        return await self._send(chat_id, format_cancellation_message(appointment))

    async def _send(self, chat_id: Optional[str], text: str) -> bool:
        if not self.configured:
            logger.info("Telegram bot token not configured, skipping notification")
            return False
        if not chat_id:
            logger.debug("Business has no Telegram chat id, skipping notification")
            return False

        url = f"{TELEGRAM_API_URL}/bot{self.bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": "Markdown"}
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(url, json=payload) as response:
                    if response.status != 200:
                        logger.warning(f"Telegram notification failed with status {response.status}")
                        return False
            logger.info(f"Telegram notification sent to chat {chat_id}")
            return True
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Error sending Telegram notification: {e}")
            return False
