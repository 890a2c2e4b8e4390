from app.signing.canonical import (
    DEFAULT_EXCLUDE_KEYS,
    SPACE_ENCODING,
    canonicalize,
    encode_component,
    is_empty,
)
from app.signing.errors import CanonicalizationError, SigningConfigError
from app.signing.signer import SIGNATURE_HEX_LENGTH, Signer, generate_signature, quick_sign, sign
from app.signing.validator import Validator, quick_validate
from app.signing.values import normalize_value

__all__ = [
    "DEFAULT_EXCLUDE_KEYS",
    "SPACE_ENCODING",
    "SIGNATURE_HEX_LENGTH",
    "CanonicalizationError",
    "SigningConfigError",
    "Signer",
    "Validator",
    "canonicalize",
    "encode_component",
    "generate_signature",
    "is_empty",
    "normalize_value",
    "quick_sign",
    "quick_validate",
    "sign",
]
