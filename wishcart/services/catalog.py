# wishcart/services/catalog.py
from typing import Optional

from wishcart.core.errors import NotFoundError
from wishcart.database import FileBackedDB, db as default_db
from wishcart.models.customer import Customer
from wishcart.models.product import Product, StockStatus


class CatalogRepository:
    """Read access to the product table."""

    def __init__(self, db: Optional[FileBackedDB] = None):
        self.db = db or default_db

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        if not sku:
            return None
        row = self.db.get_record("products", "sku", sku)
        return Product.from_dict(row) if row else None

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        if not product_id:
            return None
        row = self.db.get_record("products", "id", product_id)
        return Product.from_dict(row) if row else None

    def get_stock_status(self, product_id: str) -> StockStatus:
        product = self.get_product_by_id(product_id)
        if product is None:
            raise NotFoundError(f"The product with ID \"{product_id}\" does not exist")
        return StockStatus(product_id=str(product.id), in_stock=product.in_stock)


class CustomerRepository:
    def __init__(self, db: Optional[FileBackedDB] = None):
        self.db = db or default_db

    def get_by_id(self, customer_id: str) -> Optional[Customer]:
        if not customer_id:
            return None
        row = self.db.get_record("customers", "id", customer_id)
        return Customer.from_dict(row) if row else None

    def get_by_email(self, email: str) -> Optional[Customer]:
        if not email:
            return None
        row = self.db.get_record("customers", "email", email)
        return Customer.from_dict(row) if row else None
