from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class CartLineOut(BaseModel):
    id: str
    sku: str
    product_id: Optional[str] = None
    name: Optional[str] = None
    unit_price: float
    quantity: float
    selected_options: Dict[str, Any] = {}


class CartOut(BaseModel):
    id: Optional[str] = None
    guest_token: Optional[str] = None
    items: List[CartLineOut] = []
    items_count: float = 0
    total: float = 0.0
    updated_at: Optional[str] = None
