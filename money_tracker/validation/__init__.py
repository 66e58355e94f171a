"""Write precondition checks."""

from money_tracker.validation.validator import (
    DuplicateCategoryError,
    InvalidAmountError,
    InvalidKindError,
    MissingFieldError,
    NotAuthenticatedError,
    PreconditionError,
    ensure_unique_category_name,
    parse_kind,
    require_identity,
    validate_category_fields,
    validate_transaction_fields,
)

__all__ = [
    "DuplicateCategoryError",
    "InvalidAmountError",
    "InvalidKindError",
    "MissingFieldError",
    "NotAuthenticatedError",
    "PreconditionError",
    "ensure_unique_category_name",
    "parse_kind",
    "require_identity",
    "validate_category_fields",
    "validate_transaction_fields",
]
