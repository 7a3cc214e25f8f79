# wishcart/api/deps.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError

from wishcart.config import settings
from wishcart.database import FileBackedDB, db
from wishcart.services.cart_store import CartStore
from wishcart.services.catalog import CatalogRepository, CustomerRepository
from wishcart.services.file_storage import LocalFileStorage
from wishcart.services.mailer import Mailer
from wishcart.services.option_codec import OptionCodec
from wishcart.services.pricing import PriceCalculator
from wishcart.services.wishlist import WishlistService
from wishcart.services.wishlist_store import WishlistStore

# tokens are issued by the platform's customer service; anonymous calls are allowed
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/customer/token", auto_error=False)


def get_db() -> FileBackedDB:
    return db


def _decode_token(token: str) -> Optional[str]:
    """Return the customer identifier of a JWT signed with our secret, else None."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub") or payload.get("customer_id") or payload.get("id")
    return str(sub) if sub else None


async def get_current_customer_id(request: Request, token: Optional[str] = Depends(oauth2_scheme),
                                  database: FileBackedDB = Depends(get_db)) -> Optional[str]:
    """
    Resolve the calling customer from the Authorization header or the
    'access_token' cookie. Only tokens signed with JWT_SECRET count; anything
    else is treated as a guest. Returns None for guests and unknown customers;
    the operations decide whether that is an authorization failure.
    """
    identifier = _decode_token(token) if token else None
    if identifier is None:
        identifier = _decode_token(request.cookies.get("access_token", ""))
    if not identifier:
        return None

    customers = CustomerRepository(database)
    customer = customers.get_by_id(identifier) or customers.get_by_email(identifier)
    return customer.id if customer else None


def get_cart_store(database: FileBackedDB = Depends(get_db)) -> CartStore:
    return CartStore(database)


def get_wishlist_service(database: FileBackedDB = Depends(get_db)) -> WishlistService:
    catalog = CatalogRepository(database)
    return WishlistService(
        catalog=catalog,
        customers=CustomerRepository(database),
        cart_store=CartStore(database),
        wishlist_store=WishlistStore(database),
        codec=OptionCodec(LocalFileStorage()),
        mailer=Mailer(),
        pricing=PriceCalculator(catalog, tax_rates=settings.TAX_RATES),
    )
