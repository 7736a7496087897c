"""
Pydantic models for wishlist request/response validation.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class CreateWishlistRequest(BaseModel):
    """Request body for creating a wishlist."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    privacy: str = Field(default="friends", description="private | friends | selected_friends")


class UpdatePrivacyRequest(BaseModel):
    """Request body for changing wishlist privacy."""
    privacy: str = Field(..., description="private | friends | selected_friends")


class SetSelectedFriendsRequest(BaseModel):
    """Request body for replacing the selected friends of a wishlist."""
    friendIds: List[str] = Field(default_factory=list)


class AddItemRequest(BaseModel):
    """Request body for adding an item."""
    title: str = Field(..., min_length=1, max_length=200)
    link: Optional[str] = Field(None, max_length=2000)
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=3)
    notes: Optional[str] = Field(None, max_length=1000)


class AddCollaboratorRequest(BaseModel):
    """Request body for adding a collaborator."""
    friendId: str
