import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from .booking_service import as_local, format_long_display, format_time
from ..ports.booking_repo import BookingDto, BookingRepository
from ..ports.email_sender import EmailSender
from ...utils import utcnow

logger = logging.getLogger(__name__)


def build_reminder_email(booking: BookingDto, base_url: str) -> Dict[str, str]:
    tz = ZoneInfo(booking.booking_timezone or "Asia/Dubai")
    starts = booking.local_start_display or format_long_display(as_local(booking.selected_start, tz))
    ends = format_time(as_local(booking.selected_end, tz))
    lines = [
        f"Hi {booking.customer_name},",
        "",
        "This is a reminder that your Google Ads audit call starts in about one hour.",
        "",
        f"When: {starts} - {ends} ({tz.key})",
    ]
    if booking.meet_url:
        lines.append(f"Join: {booking.meet_url}")
    lines += [
        f"Add to calendar: {base_url.rstrip('/')}/ics?booking_id={booking.id}",
        "",
        "See you soon!",
    ]
    return {"subject": "Reminder: your Google Ads audit call starts in 1 hour", "body": "\n".join(lines)}


@dataclass
class ReminderService:
    bookings: BookingRepository
    email: EmailSender
    window_start_minutes: int = 55
    window_end_minutes: int = 65

    def send_due_reminders(self, base_url: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utcnow()
        window_start = now + timedelta(minutes=self.window_start_minutes)
        window_end = now + timedelta(minutes=self.window_end_minutes)
        due = self.bookings.due_for_reminder(window_start, window_end)
        logger.info(f"[Cron Reminders] {len(due)} booking(s) between {window_start.isoformat()} and {window_end.isoformat()}")

        results: List[Dict[str, Any]] = []
        for booking in due:
            try:
                message = build_reminder_email(booking, base_url)
                sent = self.email.send(booking.customer_email, message["subject"], message["body"])
                if not sent.success:
                    logger.error(f"[Cron Reminders] Failed to send reminder for {booking.id}: {sent.error}")
                    results.append({"booking_id": booking.id, "status": "email_failed", "error": sent.error})
                    continue
                self.bookings.mark_reminder_sent(booking.id, now)
                results.append({"booking_id": booking.id, "status": "success", "email_id": sent.email_id})
            except Exception as e:
                logger.exception(f"[Cron Reminders] Error processing booking {booking.id}")
                results.append({"booking_id": booking.id, "status": "error", "error": str(e)})

        success = sum(1 for r in results if r["status"] == "success")
        return {
            "ok": True,
            "processed": len(results),
            "success": success,
            "failed": len(results) - success,
            "results": results,
        }
