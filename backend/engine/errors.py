"""Caller-visible error kinds raised by the vault engine.

Every error carries a stable ``code`` (used in API responses and tests) and the
HTTP status the API layer maps it to.
"""


class VaultError(Exception):
    code = "vault_error"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


# Access control

class NotOwner(VaultError):
    code = "not_owner"
    status_code = 403


# Validation

class InvalidNonce(VaultError):
    code = "invalid_nonce"
    status_code = 404


class InvalidPrice(VaultError):
    code = "invalid_price"
    status_code = 422


class InvalidAddress(VaultError):
    code = "invalid_address"
    status_code = 422


class InvalidAmount(VaultError):
    code = "invalid_amount"
    status_code = 422


class AlreadyRegistered(VaultError):
    code = "already_registered"
    status_code = 409


class ArithmeticOverflow(VaultError):
    code = "arithmetic_overflow"
    status_code = 422


# Business rules

class UnsupportedToken(VaultError):
    code = "unsupported_token"
    status_code = 422


class TooSmall(VaultError):
    code = "too_small"
    status_code = 422


class InvalidSize(VaultError):
    code = "invalid_size"
    status_code = 422


class NotOpen(VaultError):
    code = "not_open"
    status_code = 409


class NotEligible(VaultError):
    code = "not_eligible"
    status_code = 409


class NonceConflict(VaultError):
    """Another writer took the next nonce first; the open can be retried."""

    code = "nonce_conflict"
    status_code = 409


# Resources

class InsufficientBalance(VaultError):
    code = "insufficient_balance"
    status_code = 409


class TransferFailed(VaultError):
    code = "transfer_failed"
    status_code = 502


class PriceUnavailable(VaultError):
    code = "price_unavailable"
    status_code = 503


# Reentrancy

class ReentrantCall(VaultError):
    code = "reentrant_call"
    status_code = 409
