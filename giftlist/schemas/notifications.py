"""
Pydantic models for notification request validation.
"""

from pydantic import BaseModel, Field


class UpdateNotificationPreferencesRequest(BaseModel):
    """Request body for updating notification preferences."""
    birthdayReminderDays: int = Field(..., ge=0, le=30, description="0 turns reminders off")
