# --- Pydantic schemas for wishlist endpoints ---
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class ConfigurableItemOption(BaseModel):
    option_id: str
    option_value: int


class DownloadableLink(BaseModel):
    link_id: str


class BundleOptionInput(BaseModel):
    id: str
    value: str
    quantity: float = 1


class ProductOptionAttributes(BaseModel):
    configurable_item_options: List[ConfigurableItemOption] = []
    grouped_product_options: List[ConfigurableItemOption] = []
    downloadable_product_links: List[DownloadableLink] = []
    bundle_options: List[BundleOptionInput] = []


class ProductOption(BaseModel):
    extension_attributes: ProductOptionAttributes = Field(default_factory=ProductOptionAttributes)


class EnteredOptionInput(BaseModel):
    uid: str = Field(..., description="Base64 option token")
    value: str = ""


class WishlistItemInput(BaseModel):
    """Payload of add / save. `sku` adds a product, `item_id` updates an item."""
    sku: Optional[str] = None
    item_id: Optional[str] = None
    quantity: Optional[float] = None
    description: Optional[str] = None
    product_option: Optional[ProductOption] = None
    selected_options: List[str] = []
    entered_options: List[EnteredOptionInput] = []


class WishlistItemUpdate(BaseModel):
    quantity: Optional[float] = None
    description: Optional[str] = None


class ShareWishlistInput(BaseModel):
    emails: List[str] = Field(..., description="Recipients, comma separated lists are not split")
    message: str = ""


class MoveToCartInput(BaseModel):
    sharing_code: Optional[str] = None
    guest_cart_id: Optional[str] = None


class ProductOut(BaseModel):
    id: Optional[str] = None
    sku: str
    name: str
    type_id: str

    model_config = ConfigDict(extra="allow")


class ItemOptionOut(BaseModel):
    label: str
    value: str


class WishlistItemOut(BaseModel):
    id: Optional[str] = None
    qty: float
    sku: str
    description: str = ""
    added_at: Optional[str] = None
    buy_request: str = "{}"
    price: Optional[float] = None
    price_without_tax: Optional[float] = None
    product: Optional[ProductOut] = None
    options: List[ItemOptionOut] = []


class WishlistOut(BaseModel):
    id: Optional[str] = None
    sharing_code: Optional[str] = None
    updated_at: Optional[str] = None
    items_count: int = 0
    name: str = ""
    creator: Optional[str] = None
    items: List[WishlistItemOut] = []


class ResultOut(BaseModel):
    success: bool = True


class MoveToCartOut(ResultOut):
    deleted_count: int = 0
    outcomes: List[Dict[str, Any]] = []
