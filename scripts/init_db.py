"""Creates the data tables with a few demo products and customers."""
import pandas as pd

from wishcart.config import settings
from wishcart.database import db


PRODUCTS = [
    {"id": "1", "sku": "lamp-01", "name": "Desk Lamp", "type_id": "simple", "price": "25.00",
     "stock": "10", "is_in_stock": "1", "visible": "1", "parent_sku": "", "tax_class_id": "2"},
    {"id": "2", "sku": "chair-01", "name": "Oak Chair", "type_id": "simple", "price": "80.00",
     "stock": "0", "is_in_stock": "1", "visible": "1", "parent_sku": "", "tax_class_id": "2"},
    {"id": "3", "sku": "shirt", "name": "Linen Shirt", "type_id": "configurable", "price": "40.00",
     "stock": "", "is_in_stock": "1", "visible": "1", "parent_sku": "", "tax_class_id": "2"},
    {"id": "4", "sku": "shirt-m", "name": "Linen Shirt M", "type_id": "simple", "price": "42.00",
     "stock": "5", "is_in_stock": "1", "visible": "0", "parent_sku": "shirt", "tax_class_id": "2"},
]

CUSTOMERS = [
    {"id": "1", "firstname": "Ada", "lastname": "Lovelace", "email": "ada@example.com"},
]

EMPTY_TABLES = {
    "carts": ["id", "customer_id", "guest_token", "items", "updated_at"],
    "wishlists": ["id", "customer_id", "sharing_code", "shared", "name", "updated_at"],
    "wishlist_items": ["id", "wishlist_id", "product_id", "sku", "quantity", "description",
                       "buy_request", "added_at"],
}


settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
settings.MEDIA_DIR.mkdir(parents=True, exist_ok=True)

for table, rows in (("products", PRODUCTS), ("customers", CUSTOMERS)):
    path = db._file_path(table)
    if path.exists():
        print(f"{path} already exists")
        continue
    pd.DataFrame(rows).to_csv(path, index=False)
    print(f"Created {path}")

for table, columns in EMPTY_TABLES.items():
    path = db._file_path(table)
    if not path.exists():
        pd.DataFrame(columns=columns).to_csv(path, index=False)
        print(f"Created {path}")
