"""
Custom exceptions for Innoprint.

Exception Hierarchy:
    InnoprintError (base)
    ├── AuthenticationRequiredError - Address operation without a signed-in user
    ├── InvalidCredentialsError     - Wrong email/password on sign-in
    ├── EmailAlreadyRegisteredError - Sign-up with an email already in use
    ├── AddressOwnershipError       - Address belongs to another user
    ├── AddressNotFoundError        - Address id not present in the store
    ├── UnknownOptionError          - Print option id missing from the option tables
    ├── ModelNotFoundError          - Catalogue model id not found
    ├── UploadValidationError       - Uploaded model file or metadata rejected
    ├── PaymentVerificationError    - Checkout callback failed signature check
    └── PaymentProviderError        - Provider order could not be created

Usage:
    Routes catch these and flash the message to the user.
    Store/database errors are NOT wrapped: they propagate unmodified so the
    caller sees the store's own message.
"""

from typing import Optional, Dict, Any


class InnoprintError(Exception):
    """
    Base exception for all Innoprint errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# IDENTITY ERRORS
# =============================================================================

class AuthenticationRequiredError(InnoprintError):
    """
    An address operation was attempted without a signed-in user.

    Raised before any store call is made.
    """

    def __init__(self, action: str = "manage addresses"):
        message = f"You must be logged in to {action}"
        super().__init__(message, {"condition": "unauthenticated", "action": action})
        self.action = action


class InvalidCredentialsError(InnoprintError):
    """Email/password pair did not match a registered user."""

    def __init__(self, email: str):
        super().__init__("Invalid email or password", {"email": email})
        self.email = email


class EmailAlreadyRegisteredError(InnoprintError):
    """Sign-up attempted with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(f"An account already exists for {email}", {"email": email})
        self.email = email


class AddressOwnershipError(InnoprintError):
    """
    The address belongs to a different user than the signed-in one.

    Checked before any store call on update, remove and set-default.
    """

    def __init__(self, address_id: Optional[str], user_id: str):
        message = "You can only modify your own addresses"
        details = {
            "condition": "ownership",
            "address_id": address_id,
            "user_id": user_id,
        }
        super().__init__(message, details)
        self.address_id = address_id
        self.user_id = user_id


class AddressNotFoundError(InnoprintError):
    """No address with the given id exists in the store."""

    def __init__(self, address_id: str):
        super().__init__(f"Address not found: {address_id}", {"address_id": address_id})
        self.address_id = address_id


# =============================================================================
# CATALOGUE / PRICING ERRORS
# =============================================================================

class UnknownOptionError(InnoprintError):
    """
    A print option id is not present in the configured option tables.

    The pricing engine itself never fails; this is raised when resolving
    raw form values (e.g. "petg", "high", "lg") into option records.
    """

    def __init__(self, kind: str, option_id: str, valid_ids: Optional[list] = None):
        message = f"Unknown {kind} option: {option_id}"
        details = {"kind": kind, "option_id": option_id}
        if valid_ids is not None:
            details["valid_ids"] = list(valid_ids)
        super().__init__(message, details)
        self.kind = kind
        self.option_id = option_id


class ModelNotFoundError(InnoprintError):
    """The requested catalogue model does not exist."""

    def __init__(self, model_id: str):
        super().__init__("Model not found", {"model_id": model_id})
        self.model_id = model_id


class UploadValidationError(InnoprintError):
    """
    An uploaded model file or its metadata was rejected.

    The message is user-facing and is flashed as-is.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


# =============================================================================
# CHECKOUT ERRORS
# =============================================================================

class PaymentVerificationError(InnoprintError):
    """
    The payment callback could not be verified.

    Either the signature did not match or required fields were missing.
    The payment may still have been captured by the provider; the user
    should contact support with the payment id.
    """

    def __init__(self, message: str, payment_id: Optional[str] = None):
        details = {
            "payment_id": payment_id,
            "resolution": "Contact support with the payment id if you were charged",
        }
        super().__init__(message, details)
        self.payment_id = payment_id


class PaymentProviderError(InnoprintError):
    """
    The payment provider's API could not create an order.

    Raised before the widget opens, so nothing has been charged.
    """

    def __init__(self, message: str, receipt: Optional[str] = None, status_code: Optional[int] = None):
        details = {"receipt": receipt, "status_code": status_code}
        super().__init__(message, details)
        self.receipt = receipt
        self.status_code = status_code
