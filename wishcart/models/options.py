# wishcart/models/options.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class OptionKind(str, Enum):
    BUNDLE = "bundle"
    CUSTOM_OPTION = "custom-option"


@dataclass(frozen=True)
class OptionToken:
    """Decoded form of a `base64("<kind>/<optionId>/<valueId>[/<quantity>]")` token."""
    kind: OptionKind
    option_id: str
    value_id: Optional[str] = None
    quantity: Optional[float] = None


@dataclass(frozen=True)
class EnteredOption:
    """An option the shopper typed in: the token travels in `uid`, the input in `value`."""
    uid: str
    value: Any = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EnteredOption":
        return cls(uid=str(d.get("uid") or d.get("id") or ""), value=d.get("value"))


@dataclass(frozen=True)
class FileReference:
    type: str
    title: str
    quote_path: str
    order_path: str
    secret_key: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
