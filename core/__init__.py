"""
Core module for Innoprint.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- database: Engine/session lifecycle and table definitions
- address_store: Address store client (default-address invariant lives here)
"""

from .exceptions import (
    InnoprintError,
    AuthenticationRequiredError,
    InvalidCredentialsError,
    EmailAlreadyRegisteredError,
    AddressOwnershipError,
    AddressNotFoundError,
    UnknownOptionError,
    ModelNotFoundError,
    UploadValidationError,
    PaymentVerificationError,
    PaymentProviderError,
)
from .database import Database
from .address_store import AddressStore

__all__ = [
    "InnoprintError",
    "AuthenticationRequiredError",
    "InvalidCredentialsError",
    "EmailAlreadyRegisteredError",
    "AddressOwnershipError",
    "AddressNotFoundError",
    "UnknownOptionError",
    "ModelNotFoundError",
    "UploadValidationError",
    "PaymentVerificationError",
    "PaymentProviderError",
    "Database",
    "AddressStore",
]
