# storefront/utils/money.py
from storefront.utils.settings import CURRENCY_SYMBOL


def format_cents(amount: int) -> str:
    """Ceny trzymamy w groszach/centach (int), formatujemy tylko do wyswietlenia."""
    return f"{CURRENCY_SYMBOL}{amount / 100:,.2f}"
