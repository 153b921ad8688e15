# signature/models/signature_image.py
from __future__ import annotations
from dataclasses import dataclass

DATA_URL_PREFIX = "data:image/png;base64,"


@dataclass(frozen=True)
class SignatureImage:
    """
    Encoded raster of a drawn signature.

    ``data_url`` holds a PNG as ``data:image/png;base64,...``. An empty string is
    the "no signature" sentinel, which is also what the backend stores for
    unsigned tickets.
    """
    data_url: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.data_url

    def __str__(self) -> str:
        return self.data_url


EMPTY_SIGNATURE = SignatureImage()


@dataclass(frozen=True)
class CanvasDimensions:
    """Pixel size of a signature bitmap (equals the container's rendered size)."""
    width: int
    height: int

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def as_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)
