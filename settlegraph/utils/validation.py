"""Transaction validation utilities."""
from settlegraph.schemas.transaction import TransactionCreate


class TransactionValidationError(Exception):
    """Custom exception for transaction rule violations."""
    pass


def validate_transaction(transaction_in: TransactionCreate) -> None:
    """
    Validate a transfer beyond what the schema checks.

    Rules:
    - payer and payee must be different people (case-insensitive)
    """
    if transaction_in.payer_username.lower() == transaction_in.payee_username.lower():
        raise TransactionValidationError(
            f"Payer and payee must differ: '{transaction_in.payer_username}'"
        )
