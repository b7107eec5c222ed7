"""Confirmation token adapters."""

from .jwt_signer import JwtEmailVerifier

__all__ = ["JwtEmailVerifier"]
