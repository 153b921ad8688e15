"""Signature feature exceptions."""
from __future__ import annotations


class SignatureError(Exception):
    """Base exception for the signature feature."""


class SignatureCodecError(SignatureError):
    """Raised when a signature image cannot be encoded or decoded."""
