"""
Wishlist API endpoints.

Handles wishlists, items, privacy settings and collaborators.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from common.utils import success_response

from giftlist.dependencies import (
    require_auth,
    optional_auth,
    get_main_db,
    get_notification_service,
    get_wishlist_service,
)
from giftlist.pipelines.wishlists import (
    add_collaborator,
    archive_wishlist,
    leave_collaboration,
)
from giftlist.schemas.wishlists import (
    AddCollaboratorRequest,
    AddItemRequest,
    CreateWishlistRequest,
    SetSelectedFriendsRequest,
    UpdatePrivacyRequest,
)


router = APIRouter(prefix="/wishlists", tags=["Wishlists"])


# =============================================================================
# Wishlist Endpoints
# =============================================================================

@router.post("")
async def create_wishlist(
    body: CreateWishlistRequest,
    user: Annotated[dict, Depends(require_auth)]
):
    """Create a wishlist owned by the current user."""
    service = get_wishlist_service()

    wishlist = await service.create_wishlist(
        owner_id=user["user_id"],
        name=body.name,
        privacy=body.privacy,
        description=body.description,
    )

    return success_response(wishlist)


@router.get("/mine")
async def get_my_wishlists(
    user: Annotated[dict, Depends(require_auth)]
):
    """Get wishlists the current user owns or collaborates on."""
    service = get_wishlist_service()
    wishlists = await service.get_owned_wishlists(user["user_id"])
    return success_response({"wishlists": wishlists})


@router.get("/user/{owner_id}")
async def get_friend_wishlists(
    owner_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Get the wishlists of another user that the current user may see."""
    service = get_wishlist_service()
    wishlists = await service.get_visible_wishlists(owner_id, user["user_id"])
    return success_response({"wishlists": wishlists})


@router.get("/{wishlist_id}")
async def get_wishlist(
    wishlist_id: str,
    user: Annotated[Optional[dict], Depends(optional_auth)]
):
    """Get a wishlist. Anonymous viewers are denied by the privacy check."""
    service = get_wishlist_service()
    viewer_id = user["user_id"] if user else None
    wishlist = await service.get_wishlist_for_viewer(wishlist_id, viewer_id)
    return success_response(wishlist)


@router.get("/{wishlist_id}/items")
async def get_wishlist_items(
    wishlist_id: str,
    user: Annotated[Optional[dict], Depends(optional_auth)]
):
    """Get the items of a wishlist."""
    service = get_wishlist_service()
    viewer_id = user["user_id"] if user else None
    items = await service.get_items_for_viewer(wishlist_id, viewer_id)
    return success_response({"items": items})


@router.post("/{wishlist_id}/items")
async def add_item(
    wishlist_id: str,
    body: AddItemRequest,
    user: Annotated[dict, Depends(require_auth)]
):
    """Add an item to a wishlist."""
    service = get_wishlist_service()

    item = await service.add_item(
        wishlist_id=wishlist_id,
        user_id=user["user_id"],
        title=body.title,
        link=body.link,
        price=body.price,
        currency=body.currency,
        notes=body.notes,
    )

    return success_response(item)


# =============================================================================
# Privacy Endpoints
# =============================================================================

@router.put("/{wishlist_id}/privacy")
async def update_privacy(
    wishlist_id: str,
    body: UpdatePrivacyRequest,
    user: Annotated[dict, Depends(require_auth)]
):
    """Change a wishlist's privacy."""
    service = get_wishlist_service()
    wishlist = await service.update_privacy(wishlist_id, user["user_id"], body.privacy)
    return success_response(wishlist)


@router.put("/{wishlist_id}/selected-friends")
async def set_selected_friends(
    wishlist_id: str,
    body: SetSelectedFriendsRequest,
    user: Annotated[dict, Depends(require_auth)]
):
    """Replace the friends who may see a selected_friends wishlist."""
    service = get_wishlist_service()
    wishlist = await service.set_selected_friends(wishlist_id, user["user_id"], body.friendIds)
    return success_response(wishlist)


# =============================================================================
# Archive Endpoints
# =============================================================================

@router.post("/{wishlist_id}/archive")
async def archive(
    wishlist_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Archive a wishlist."""
    wishlist = await archive_wishlist(
        wishlist_service=get_wishlist_service(),
        notification_service=get_notification_service(),
        db=get_main_db(),
        user_id=user["user_id"],
        wishlist_id=wishlist_id,
    )
    return success_response(wishlist)


@router.post("/{wishlist_id}/unarchive")
async def unarchive(
    wishlist_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Restore an archived wishlist."""
    service = get_wishlist_service()
    wishlist = await service.unarchive_wishlist(wishlist_id, user["user_id"])
    return success_response(wishlist)


# =============================================================================
# Collaborator Endpoints
# =============================================================================

@router.post("/{wishlist_id}/collaborators")
async def add_wishlist_collaborator(
    wishlist_id: str,
    body: AddCollaboratorRequest,
    user: Annotated[dict, Depends(require_auth)]
):
    """Add a friend as collaborator."""
    wishlist = await add_collaborator(
        wishlist_service=get_wishlist_service(),
        notification_service=get_notification_service(),
        db=get_main_db(),
        user_id=user["user_id"],
        wishlist_id=wishlist_id,
        friend_id=body.friendId,
    )
    return success_response(wishlist)


@router.delete("/{wishlist_id}/collaborators/{collaborator_id}")
async def remove_wishlist_collaborator(
    wishlist_id: str,
    collaborator_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Remove a collaborator, or leave a wishlist as collaborator."""
    wishlist = await leave_collaboration(
        wishlist_service=get_wishlist_service(),
        notification_service=get_notification_service(),
        db=get_main_db(),
        user_id=user["user_id"],
        wishlist_id=wishlist_id,
        collaborator_id=collaborator_id,
    )
    return success_response(wishlist)
