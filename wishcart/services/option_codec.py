# wishcart/services/option_codec.py
"""
Decoding of option tokens sent by the storefront.

A token is `base64("<kind>/<optionId>/<valueId>[/<quantity>]")`. Tokens arrive
in two lists on a wishlist item:

  - selected options: plain strings, everything is inside the token
  - entered options: `{"uid": <token>, "value": <shopper input>}`, where the
    value completes the token (bundle quantity, custom option text or an
    inline file upload)

Each provider only understands its own kind and ignores the rest, so the same
lists are handed to every provider. `OptionCodec.build_buy_request` merges the
provider outputs into the buy request used when adding the item to a cart.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from wishcart.core.errors import MalformedOptionError
from wishcart.models.options import EnteredOption, FileReference, OptionKind, OptionToken
from wishcart.services.file_storage import LocalFileStorage

logger = logging.getLogger(__name__)

QUOTE_MEDIA_PATH = "custom_options/quote/"
ORDER_MEDIA_PATH = "custom_options/order/"
UPLOAD_CONTENT_TYPE = "application/octet-stream"
BUNDLE_OPTION_DATA_COUNT = 4

EnteredInput = Union[EnteredOption, Dict[str, Any]]


def decode_segments(token: str) -> List[str]:
    """base64-decode a token and split it on '/'. Raises MalformedOptionError."""
    if not isinstance(token, str):
        raise MalformedOptionError("Option identifier must be a string")
    padded = token.strip()
    rem = len(padded) % 4
    if rem:
        padded += "=" * (4 - rem)
    try:
        payload = base64.b64decode(padded.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        raise MalformedOptionError(f"Option identifier {token!r} is not a valid encoded option")
    return payload.split("/")


def encode_token(*segments: Any) -> str:
    """Inverse of decode_segments; handy for clients and tests."""
    return base64.b64encode("/".join(str(s) for s in segments).encode("utf-8")).decode("ascii")


def _parse_quantity(raw: Any) -> float:
    try:
        qty = float(raw)
    except (TypeError, ValueError):
        raise MalformedOptionError(f"Invalid option quantity {raw!r}")
    return int(qty) if qty == int(qty) else qty


def _entered(options: Iterable[EnteredInput]) -> List[EnteredOption]:
    return [o if isinstance(o, EnteredOption) else EnteredOption.from_dict(o) for o in options or []]


class BundleOptionProvider:
    kind = OptionKind.BUNDLE

    def decode(self, token: str, entered: bool = False, value: Any = None) -> Optional[OptionToken]:
        segments = decode_segments(token)
        if segments[0] != self.kind.value:
            return None
        if entered:
            # the quantity travels next to the token, not inside it
            if value is not None and value != "":
                segments = segments + [str(value)]
        if len(segments) != BUNDLE_OPTION_DATA_COUNT:
            raise MalformedOptionError("Wrong format of the entered option data")
        _, option_id, value_id, quantity = segments
        return OptionToken(self.kind, option_id, value_id, _parse_quantity(quantity))

    def execute(self, selected: Sequence[str], entered: Sequence[EnteredOption],
                product_id: Optional[str] = None) -> Dict[str, Any]:
        bundle_option: Dict[str, List[str]] = {}
        bundle_option_qty: Dict[str, List[Any]] = {}
        decoded = [self.decode(t) for t in selected or []]
        decoded += [self.decode(o.uid, entered=True, value=o.value) for o in entered or []]
        for tok in decoded:
            if tok is None:
                continue
            bundle_option.setdefault(tok.option_id, []).append(tok.value_id)
            bundle_option_qty.setdefault(tok.option_id, []).append(tok.quantity)
        if not bundle_option:
            return {}
        return {"bundle_option": bundle_option, "bundle_option_qty": bundle_option_qty}


class CustomOptionProvider:
    kind = OptionKind.CUSTOM_OPTION

    def __init__(self, storage: Optional[LocalFileStorage] = None):
        self.storage = storage or LocalFileStorage()

    def decode(self, token: str, entered: bool = False, value: Any = None) -> Optional[OptionToken]:
        segments = decode_segments(token)
        if segments[0] != self.kind.value:
            return None
        if len(segments) < 2 or not segments[1]:
            raise MalformedOptionError("Wrong format of the custom option data")
        if entered:
            return OptionToken(self.kind, segments[1], None if value is None else str(value))
        if len(segments) < 3:
            raise MalformedOptionError("Wrong format of the custom option data")
        return OptionToken(self.kind, segments[1], "/".join(segments[2:]))

    def file_reference(self, uid: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Interpret `value` as `{"file_name": ..., "file_data": ...}`. Returns the
        payload split into reference and raw data, or None for plain values.
        """
        try:
            data = json.loads(value)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        file_name = data.get("file_name")
        file_data = data.get("file_data")
        if not file_name or not file_data or not isinstance(file_name, str) or not isinstance(file_data, str):
            return None
        # keep only the last path component of what the client calls the file
        file_name = PurePosixPath(file_name.replace("\\", "/")).name
        if not file_name:
            return None
        # decode_segments reads the stripped token as well
        inside_path = f"{uid.strip()}/_/{file_name}"
        ref = FileReference(
            type=UPLOAD_CONTENT_TYPE,
            title=file_name,
            quote_path=QUOTE_MEDIA_PATH + inside_path,
            order_path=ORDER_MEDIA_PATH + inside_path,
            secret_key=file_name,
        )
        return {"reference": ref, "raw": file_data}

    def store_file(self, ref: FileReference, raw: str) -> None:
        # data-URLs carry a "data:<mime>;base64," prefix
        encoded = raw[raw.find(",") + 1:]
        try:
            contents = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise MalformedOptionError(f"File data for {ref.title!r} is not valid base64")
        path = self.storage.write_file(ref.quote_path, contents)
        logger.debug("Stored custom option file %s (%d bytes)", path, len(contents))

    def execute(self, selected: Sequence[str], entered: Sequence[EnteredOption],
                product_id: Optional[str] = None) -> Dict[str, Any]:
        options: Dict[str, List[Any]] = {}
        for token in selected or []:
            tok = self.decode(token)
            if tok is None:
                continue
            options.setdefault(tok.option_id, []).append(tok.value_id)

        for option in entered or []:
            tok = self.decode(option.uid, entered=True, value=option.value)
            if tok is None:
                continue
            upload = self.file_reference(option.uid, option.value)
            if upload is not None:
                self.store_file(upload["reference"], upload["raw"])
                options.setdefault(tok.option_id, []).append(upload["reference"].to_dict())
            else:
                options.setdefault(tok.option_id, []).append(option.value)

        if not options:
            return {}
        result: Dict[str, Any] = {"options": self.flatten(options)}
        if product_id:
            result["product"] = product_id
        return result

    @staticmethod
    def flatten(options: Dict[str, List[Any]]) -> Dict[str, Any]:
        """Single values become scalars; multi-select values stay lists."""
        return {k: (v[0] if len(v) == 1 else v) for k, v in options.items()}


class OptionCodec:
    """Runs every option provider over a wishlist item's option tokens."""

    def __init__(self, storage: Optional[LocalFileStorage] = None, providers=None):
        if providers is None:
            providers = {
                OptionKind.BUNDLE: BundleOptionProvider(),
                OptionKind.CUSTOM_OPTION: CustomOptionProvider(storage),
            }
        missing = set(OptionKind) - set(providers)
        if missing:
            raise ValueError(f"No option provider for: {sorted(k.value for k in missing)}")
        self.providers = providers

    def build_buy_request(self, selected: Optional[Sequence[str]] = None,
                          entered: Optional[Iterable[EnteredInput]] = None,
                          product_id: Optional[str] = None) -> Dict[str, Any]:
        selected = list(selected or [])
        entered_options = _entered(entered or [])
        buy_request: Dict[str, Any] = {}
        for kind in OptionKind:
            buy_request.update(self.providers[kind].execute(selected, entered_options, product_id))
        return buy_request
