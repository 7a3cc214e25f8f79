# tests/conftest.py
import os
import sys
import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from wishcart import config as app_config  # noqa: E402
from wishcart.database import db as file_db  # noqa: E402
from wishcart.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def temp_data_dir(tmp_path):
    """
    Point every table and uploaded file at a fresh temp directory and make
    sure no test talks to a real SMTP server.
    """
    settings = app_config.settings
    orig = (settings.DATA_DIR, settings.MEDIA_DIR, settings.SMTP_HOST, settings.BASE_URL)
    settings.DATA_DIR = tmp_path / "data"
    settings.MEDIA_DIR = tmp_path / "media"
    settings.SMTP_HOST = ""
    settings.BASE_URL = "http://shop.test/"
    try:
        yield settings.DATA_DIR
    finally:
        settings.DATA_DIR, settings.MEDIA_DIR, settings.SMTP_HOST, settings.BASE_URL = orig


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_header():
    """
    Helper that returns a callable building an Authorization header with a
    signed token for a customer id.
    Usage: hdr = auth_header(customer_id)
    """
    def _h(customer_id: str):
        token = jwt.encode({"sub": str(customer_id)}, app_config.settings.JWT_SECRET,
                           algorithm=app_config.settings.JWT_ALGORITHM)
        return {"Authorization": f"Bearer {token}"}
    return _h


@pytest.fixture
def make_customer():
    def _fn(firstname="Ada", lastname="Lovelace", email=None):
        if email is None:
            email = f"c_{uuid.uuid4().hex[:8]}@example.test"
        return file_db.create_record(
            "customers",
            {"firstname": firstname, "lastname": lastname, "email": email},
            id_field="id",
        )
    return _fn


@pytest.fixture
def customer(make_customer):
    return make_customer()


@pytest.fixture
def make_product():
    """
    Create a catalog row. Usage: make_product(name="Lamp", price="10", stock="3")
    """
    def _fn(**fields):
        row = {
            "sku": f"sku-{uuid.uuid4().hex[:6]}",
            "name": "Test Product",
            "type_id": "simple",
            "price": "10.00",
            "stock": "",
            "is_in_stock": "1",
            "visible": "1",
        }
        row.update(fields)
        return file_db.create_record("products", row, id_field="id")
    return _fn
