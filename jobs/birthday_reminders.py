"""
Birthday reminder background job.

Creates birthday_reminder notifications for friends whose birthday is a
user's chosen number of days away. This job should be run daily via CRON.

Usage:
    Run via CRON:
        0 7 * * * cd /path/to/project && python -m jobs.birthday_reminders

    Or run directly:
        python -m jobs.birthday_reminders
"""

import asyncio
import calendar
import logging
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from giftlist.config import settings
from giftlist.database.collections import USERS
from giftlist.notifications.catalog import build_default_registry
from giftlist.notifications.types import NotificationType
from giftlist.services.friends.friend_service import FriendService
from giftlist.services.notifications.notification_service import (
    NotificationService,
    validate_reminder_days,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_birthday(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Parse a stored birthday (YYYY-MM-DD string or date). None if unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def next_birthday(birthday: date, today: date) -> date:
    """
    Next occurrence of a birthday on or after `today`.

    Feb 29 birthdays fall on Feb 28 in non-leap years.
    """
    def occurrence(year: int) -> date:
        if birthday.month == 2 and birthday.day == 29 and not calendar.isleap(year):
            return date(year, 2, 28)
        return date(year, birthday.month, birthday.day)

    this_year = occurrence(today.year)
    if this_year >= today:
        return this_year
    return occurrence(today.year + 1)


def days_until_birthday(birthday: date, today: date) -> int:
    """Days from `today` until the next occurrence of `birthday` (0 on the day)."""
    return (next_birthday(birthday, today) - today).days


class BirthdayReminderJob:
    """
    Sends birthday reminders to users about their friends.

    For every user whose reminder preference is above zero:
    1. Loads the user's friends with a birthday on file
    2. For each friend whose next birthday is exactly that many days away,
       creates a birthday_reminder notification
    3. Deduplicates per friend per birthday year, so reruns on the same
       day create nothing new
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        default_reminder_days: int = 3,
        notification_service: Optional[NotificationService] = None,
        friend_service: Optional[FriendService] = None,
    ):
        """
        Initialize the birthday reminder job.

        Args:
            db: Application database
            default_reminder_days: Used when a user has no preference set
            notification_service: Override for the notification service
            friend_service: Override for the friend service
        """
        self._db = db
        self._users = db[USERS]
        self._default_reminder_days = default_reminder_days
        self._notification_service = notification_service or NotificationService(
            db,
            registry=build_default_registry(),
            default_reminder_days=default_reminder_days,
        )
        self._friend_service = friend_service or FriendService(db)

    def _reminder_days(self, user: Dict[str, Any]) -> int:
        prefs = user.get("notificationPreferences") or {}
        days = prefs.get("birthdayReminderDays")
        if days is None:
            return self._default_reminder_days
        return validate_reminder_days(days)

    async def run(self, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Execute the birthday reminder job.

        Args:
            today: Date to compute reminders for (defaults to today, UTC)

        Returns:
            Dict with job results including counts and any errors
        """
        logger.info("Starting birthday reminder job")
        start_time = datetime.now(timezone.utc)
        today = today or start_time.date()

        results = {
            "startTime": start_time.isoformat(),
            "usersProcessed": 0,
            "remindersCreated": 0,
            "errors": [],
        }

        try:
            cursor = self._users.find({}, {"notificationPreferences": 1})
            users = await cursor.to_list(length=None)

            for user in users:
                try:
                    reminder_days = self._reminder_days(user)
                    if reminder_days <= 0:
                        continue

                    created = await self._remind_user(str(user["_id"]), reminder_days, today)
                    results["usersProcessed"] += 1
                    results["remindersCreated"] += created
                except Exception as e:
                    error_msg = f"Failed to process reminders for user {user['_id']}: {str(e)}"
                    logger.error(error_msg)
                    results["errors"].append(error_msg)

        except Exception as e:
            error_msg = f"Job failed: {str(e)}"
            logger.error(error_msg)
            results["errors"].append(error_msg)

        results["endTime"] = datetime.now(timezone.utc).isoformat()
        results["durationSeconds"] = (
            datetime.now(timezone.utc) - start_time
        ).total_seconds()

        logger.info(
            f"Birthday reminder job completed. "
            f"Reminders: {results['remindersCreated']}, "
            f"Errors: {len(results['errors'])}"
        )

        return results

    async def _remind_user(self, user_id: str, reminder_days: int, today: date) -> int:
        created = 0
        friends = await self._friend_service.get_friend_profiles(user_id)

        for friend in friends:
            birthday = parse_birthday(friend.get("birthday"))
            if birthday is None:
                continue

            upcoming = next_birthday(birthday, today)
            days_until = (upcoming - today).days
            if days_until != reminder_days:
                continue

            notification = await self._notification_service.create_notification(
                user_id=user_id,
                notification_type=NotificationType.BIRTHDAY_REMINDER.value,
                metadata={
                    "friend_id": friend["id"],
                    "friend_name": friend.get("displayName") or "Your friend",
                    "birthday_date": upcoming.isoformat(),
                    "days_until": days_until,
                },
                dedup_key=f"birthday:{friend['id']}:{upcoming.year}",
            )
            if notification:
                created += 1

        return created


async def main():
    """Main entry point for the birthday reminder job."""
    client = AsyncIOMotorClient(settings.MONGODB_URI)
    job = BirthdayReminderJob(
        db=client[settings.MONGODB_DATABASE],
        default_reminder_days=settings.BIRTHDAY_REMINDER_DAYS,
    )

    try:
        results = await job.run()

        print("\n=== Birthday Reminder Job Results ===")
        print(f"Start Time: {results['startTime']}")
        print(f"End Time: {results['endTime']}")
        print(f"Duration: {results['durationSeconds']:.2f} seconds")
        print(f"Users Processed: {results['usersProcessed']}")
        print(f"Reminders Created: {results['remindersCreated']}")

        if results["errors"]:
            print(f"\nErrors ({len(results['errors'])}):")
            for error in results["errors"]:
                print(f"  - {error}")

        exit_code = 1 if results["errors"] else 0
        sys.exit(exit_code)

    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
