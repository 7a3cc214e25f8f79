from typing import Optional
from fastapi import APIRouter, Depends

from wishcart.api.deps import get_current_customer_id, get_wishlist_service
from wishcart.api.schemas.wishlist import (
    MoveToCartInput,
    MoveToCartOut,
    ResultOut,
    ShareWishlistInput,
    WishlistItemInput,
    WishlistItemOut,
    WishlistItemUpdate,
    WishlistOut,
)
from wishcart.services.wishlist import WishlistService

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


@router.get("", response_model=WishlistOut)
def get_wishlist(customer_id: Optional[str] = Depends(get_current_customer_id),
                 service: WishlistService = Depends(get_wishlist_service)):
    return service.get_wishlist(customer_id)


@router.get("/shared/{sharing_code}", response_model=WishlistOut)
def get_shared_wishlist(sharing_code: str, service: WishlistService = Depends(get_wishlist_service)):
    """Public view of a wishlist that was shared by mail."""
    return service.get_shared_wishlist(sharing_code)


@router.post("/items", status_code=201, response_model=WishlistItemOut)
def add_item(payload: WishlistItemInput,
             customer_id: Optional[str] = Depends(get_current_customer_id),
             service: WishlistService = Depends(get_wishlist_service)):
    return service.add_item(customer_id, payload.model_dump(exclude_unset=True))


@router.put("/items", response_model=WishlistItemOut)
def save_item(payload: WishlistItemInput,
              customer_id: Optional[str] = Depends(get_current_customer_id),
              service: WishlistService = Depends(get_wishlist_service)):
    """Add when `sku` is given, otherwise update the item named by `item_id`."""
    return service.save_item(customer_id, payload.model_dump(exclude_unset=True))


@router.patch("/items/{item_id}", response_model=WishlistItemOut)
def update_item(item_id: str, payload: WishlistItemUpdate,
                customer_id: Optional[str] = Depends(get_current_customer_id),
                service: WishlistService = Depends(get_wishlist_service)):
    return service.update_item(customer_id, item_id, payload.model_dump(exclude_unset=True))


@router.delete("/items/{item_id}", response_model=ResultOut)
def remove_item(item_id: str,
                customer_id: Optional[str] = Depends(get_current_customer_id),
                service: WishlistService = Depends(get_wishlist_service)):
    return {"success": service.remove_item(customer_id, item_id)}


@router.delete("", response_model=ResultOut)
def clear_wishlist(customer_id: Optional[str] = Depends(get_current_customer_id),
                   service: WishlistService = Depends(get_wishlist_service)):
    return {"success": service.clear(customer_id)}


@router.post("/share", response_model=ResultOut)
def share_wishlist(payload: ShareWishlistInput,
                   customer_id: Optional[str] = Depends(get_current_customer_id),
                   service: WishlistService = Depends(get_wishlist_service)):
    return {"success": service.share(customer_id, payload.emails, payload.message)}


@router.post("/move-to-cart", response_model=MoveToCartOut)
def move_to_cart(payload: Optional[MoveToCartInput] = None,
                 customer_id: Optional[str] = Depends(get_current_customer_id),
                 service: WishlistService = Depends(get_wishlist_service)):
    """
    Move every wishlist item into the cart. Item failures come back as a 400
    listing each of them, after the successful part was saved.
    """
    payload = payload or MoveToCartInput()
    report = service.move_to_cart(customer_id, payload.sharing_code, payload.guest_cart_id)
    return {
        "success": True,
        "deleted_count": report.deleted_count,
        "outcomes": [
            {"item_id": o.item_id, "sku": o.sku, "state": o.state.value} for o in report.outcomes
        ],
    }
