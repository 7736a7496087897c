"""
Claim API endpoints.

Claimants see who claimed what; owners and collaborators only ever see
whether an item is claimed.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from common.utils.exceptions import ForbiddenException

from giftlist.dependencies import (
    require_auth,
    get_notification_service,
    get_ownership_flag_service,
    get_wishlist_service,
)
from giftlist.pipelines.claims import claim_item, unclaim_item


router = APIRouter(tags=["Claims"])


@router.post("/items/{item_id}/claim")
async def claim(
    item_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Claim an item."""
    result = await claim_item(
        flag_service=get_ownership_flag_service(),
        wishlist_service=get_wishlist_service(),
        notification_service=get_notification_service(),
        user_id=user["user_id"],
        item_id=item_id,
    )
    return success_response(result)


@router.delete("/items/{item_id}/claim")
async def unclaim(
    item_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Remove the current user's claim on an item."""
    result = await unclaim_item(
        flag_service=get_ownership_flag_service(),
        user_id=user["user_id"],
        item_id=item_id,
    )
    return success_response(result)


@router.get("/items/{item_id}/claims")
async def get_item_claims(
    item_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Get who claimed an item. Empty for the wishlist's owners."""
    service = get_ownership_flag_service()
    claimant_ids = await service.query_flags(item_id, user["user_id"])
    return success_response({
        "itemId": item_id,
        "claimantIds": sorted(claimant_ids),
    })


@router.get("/items/{item_id}/claim-status")
async def get_claim_status(
    item_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """
    Whether an item is claimed, for the wishlist's owners.

    Only owners and collaborators use this endpoint; other viewers use
    the claims endpoint.
    """
    wishlist_service = get_wishlist_service()
    item = await wishlist_service.get_item(item_id)
    policy = await wishlist_service.get_policy(str(item["wishlistId"]))

    if not policy.is_owner(user["user_id"]):
        raise ForbiddenException(
            message="Only wishlist owners can view claim status",
            code="NOT_WISHLIST_OWNER"
        )

    status = await get_ownership_flag_service().owner_claim_status(item_id)
    return success_response(status.model_dump())


@router.get("/wishlists/{wishlist_id}/claims")
async def get_wishlist_claims(
    wishlist_id: str,
    user: Annotated[dict, Depends(require_auth)]
):
    """Get claimants of all claimed items on a wishlist."""
    service = get_ownership_flag_service()
    flags = await service.query_wishlist_flags(wishlist_id, user["user_id"])
    return success_response({
        "wishlistId": wishlist_id,
        "items": {item_id: sorted(ids) for item_id, ids in flags.items()},
    })


@router.get("/claims/mine")
async def get_my_claims(
    user: Annotated[dict, Depends(require_auth)]
):
    """Get the current user's claims."""
    service = get_ownership_flag_service()
    claims = await service.get_claims_for_user(user["user_id"])
    return success_response({"claims": claims})
