from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends

from wishcart.api.deps import get_cart_store, get_current_customer_id
from wishcart.api.schemas.cart import CartOut
from wishcart.core.errors import AuthorizationError
from wishcart.models.cart import Cart
from wishcart.services.cart_store import CartStore

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _cart_out(cart: Cart) -> Dict[str, Any]:
    return {
        "id": cart.id,
        "guest_token": cart.guest_token,
        "items": [it.to_dict() for it in cart.items],
        "items_count": cart.count_items(),
        "total": cart.total(),
        "updated_at": cart.updated_at,
    }


@router.post("/guest", status_code=201, response_model=CartOut)
def create_guest_cart(store: CartStore = Depends(get_cart_store)):
    """Create an empty guest cart. Its `guest_token` is what move-to-cart takes as `guest_cart_id`."""
    return _cart_out(store.create_guest_cart())


@router.get("/guest/{token}", response_model=CartOut)
def get_guest_cart(token: str, store: CartStore = Depends(get_cart_store)):
    return _cart_out(store.get_cart_by_guest_token(token))


@router.get("/mine", response_model=CartOut)
def get_my_cart(customer_id: Optional[str] = Depends(get_current_customer_id),
                store: CartStore = Depends(get_cart_store)):
    if not customer_id:
        raise AuthorizationError("Authorization unsuccessful")
    return _cart_out(store.get_or_create_cart_for_customer(customer_id))
