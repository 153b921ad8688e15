# signature/models/signature_config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Tuple


def _hex_to_rgba(hexstr: str) -> Tuple[int, int, int, int]:
    """
    Convert hex color (#RRGGBB or #RGB) into an opaque RGBA tuple for PIL.
    """
    s = (hexstr or "#000000").strip()
    if not s.startswith("#"):
        s = "#" + s
    if len(s) == 4:
        r = int(s[1] * 2, 16); g = int(s[2] * 2, 16); b = int(s[3] * 2, 16)
    else:
        r = int(s[1:3], 16); g = int(s[3:5], 16); b = int(s[5:7], 16)
    return (r, g, b, 255)


@dataclass
class SignatureConfig:
    """
    Pen appearance for signature pads, read from the [Signature] config section.
    """
    stroke_width: int = 2
    pen_color: str = "#000000"

    @property
    def pen_rgba(self) -> Tuple[int, int, int, int]:
        return _hex_to_rgba(self.pen_color)

    @classmethod
    def from_settings(cls, settings: Any) -> "SignatureConfig":
        return cls(
            stroke_width=max(1, int(getattr(settings, "stroke_width", 2))),
            pen_color=str(getattr(settings, "pen_color", "#000000")),
        )
