# signature/logic/signature_codec.py
"""
PNG <-> SignatureImage conversion.

Signatures travel as PNG data URLs so they can be embedded in the ticket JSON
without a separate upload. Decoding is tolerant about the prefix (a bare
base64 payload is accepted as well).
"""
from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..exceptions.errors import SignatureCodecError
from ..models.signature_image import DATA_URL_PREFIX, EMPTY_SIGNATURE, SignatureImage


def encode_png(image: Image.Image) -> SignatureImage:
    """Encode a PIL image as a PNG data URL."""
    buf = io.BytesIO()
    try:
        image.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise SignatureCodecError(f"Cannot encode signature: {exc}") from exc
    payload = base64.b64encode(buf.getvalue()).decode("ascii")
    return SignatureImage(DATA_URL_PREFIX + payload)


def png_bytes(signature: SignatureImage) -> bytes:
    """Raw PNG bytes of a non-empty signature."""
    if signature.is_empty:
        raise SignatureCodecError("Empty signature has no image data")
    data = signature.data_url
    if data.startswith("data:"):
        _, _, data = data.partition(",")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureCodecError(f"Invalid base64 payload: {exc}") from exc


def decode_png(signature: SignatureImage) -> Image.Image:
    """Decode a signature into an RGBA PIL image."""
    raw = png_bytes(signature)
    try:
        with Image.open(io.BytesIO(raw)) as im:
            im.load()
            return im.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise SignatureCodecError(f"Cannot decode signature image: {exc}") from exc


def from_png_bytes(raw: bytes) -> SignatureImage:
    """Wrap PNG bytes read from disk; empty input gives the empty sentinel."""
    if not raw:
        return EMPTY_SIGNATURE
    return SignatureImage(DATA_URL_PREFIX + base64.b64encode(raw).decode("ascii"))
