# wishcart/models/customer.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Customer:
    """
    Read-only view of a platform customer. Only the fields the wishlist needs
    (creator name, sender of share mails) are kept.
    """
    id: str
    firstname: str = ""
    lastname: str = ""
    email: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Customer":
        if d is None:
            raise ValueError("Cannot construct Customer from None")
        return cls(
            id=str(d.get("id") or d.get("customer_id") or ""),
            firstname=str(d.get("firstname") or d.get("first_name") or ""),
            lastname=str(d.get("lastname") or d.get("last_name") or ""),
            email=str(d.get("email") or ""),
        )

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
