# moneytor/utils/currency.py
from typing import NamedTuple, Optional


class Currency(NamedTuple):
    code: str
    symbol: str
    name: str
    position: str  # "left" | "right"


CURRENCIES = [
    Currency("USD", "$", "US Dollar", "left"),
    Currency("EUR", "€", "Euro", "left"),
    Currency("GBP", "£", "British Pound", "left"),
    Currency("CAD", "C$", "Canadian Dollar", "left"),
    Currency("AUD", "A$", "Australian Dollar", "left"),
    Currency("JPY", "¥", "Japanese Yen", "left"),
    Currency("CHF", "CHF", "Swiss Franc", "left"),
    Currency("ILS", "₪", "Israeli Shekel", "right"),
    Currency("SEK", "kr", "Swedish Krona", "left"),
    Currency("NOK", "kr", "Norwegian Krone", "left"),
    Currency("DKK", "kr", "Danish Krone", "left"),
    Currency("PLN", "zł", "Polish Złoty", "left"),
    Currency("CZK", "Kč", "Czech Koruna", "right"),
    Currency("HUF", "Ft", "Hungarian Forint", "right"),
    Currency("SGD", "S$", "Singapore Dollar", "left"),
    Currency("HKD", "HK$", "Hong Kong Dollar", "left"),
    Currency("NZD", "NZ$", "New Zealand Dollar", "left"),
]

_BY_CODE = {c.code: c for c in CURRENCIES}


def get_currency(code: str) -> Optional[Currency]:
    return _BY_CODE.get(code.upper()) if code else None


def format_currency(amount: float, code: Optional[str] = "USD", show_symbol: bool = True, decimals: int = 2) -> str:
    """
    Format an amount with thousands separators and the currency symbol on the
    side the currency expects, e.g. ``$1,234.50`` or ``1,234.50 ₪``.
    Unknown codes are prefixed with the code itself.
    """
    code = code or "USD"
    number = f"{abs(amount):,.{decimals}f}"
    sign = "-" if amount < 0 else ""

    if not show_symbol:
        return f"{sign}{number}"

    currency = get_currency(code)
    if currency is None:
        return f"{sign}{code.upper()} {number}"
    if currency.position == "right":
        return f"{sign}{number} {currency.symbol}"
    return f"{sign}{currency.symbol}{number}"
