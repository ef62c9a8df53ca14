"""
Ledger error taxonomy.

Each error carries the HTTP status the API answers with; the message is
returned to the client as ``{"message": ...}``.
"""


class LedgerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Missing required field or enum violation."""
    status_code = 400


class NotFound(LedgerError):
    """Unknown transaction id on update or delete."""
    status_code = 404


class StoreFailure(LedgerError):
    """The persistence layer is unreachable or rejected the operation."""
    status_code = 500


def describe_validation_errors(errors) -> str:
    """Flatten pydantic error dicts into one readable line."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts) or "Invalid transaction"
