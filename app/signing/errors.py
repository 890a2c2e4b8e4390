from __future__ import annotations


class SigningConfigError(ValueError):
    """Raised when a signer or validator is built with an unusable secret."""


class CanonicalizationError(ValueError):
    """Raised when a parameter value cannot be rendered into the signing string."""
