from settlegraph.core.config import settings


def format_amount(amount: float, symbol: str | None = None) -> str:
    """Render an amount with the configured currency symbol and two decimals."""
    if symbol is None:
        symbol = settings.CURRENCY_SYMBOL
    return f"{symbol}{float(amount or 0):.2f}"
