"""Send day-before appointment reminders.

Meant to run once a day from cron:

    python -m app.scripts.send_reminders              # tomorrow
    python -m app.scripts.send_reminders --date=2026-03-02
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta

from app.core.errors import InvalidDate
from app.core.logging import setup_logging
from app.services.notification_service import NotificationDispatcher
from app.utils.dates import parse_day

logger = logging.getLogger(__name__)


async def run(day: date) -> int:
    return await NotificationDispatcher().send_reminders(day)


def main():
    parser = argparse.ArgumentParser(description="Send appointment reminders for one day")
    parser.add_argument("--date", help="Day to remind (YYYY-MM-DD); defaults to tomorrow")
    args = parser.parse_args()

    setup_logging()
    try:
        day = parse_day(args.date) if args.date else date.today() + timedelta(days=1)
    except InvalidDate as e:
        print(f"❌ Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    count = asyncio.run(run(day))
    print(f"✅ {count} reminder(s) sent for {day.isoformat()}")


if __name__ == "__main__":
    main()
