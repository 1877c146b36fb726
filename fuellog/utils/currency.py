"""
Currency formatting.

A single formatter parameterised by fraction digits and whether to show the
currency symbol. Prices are usually shown with one more fraction digit than
the currency's default (tenths of a cent).
"""

import logging

logger = logging.getLogger(__name__)

# currency code -> (symbol, default fraction digits)
CURRENCIES = {
    'USD': ('$', 2),
    'CAD': ('CA$', 2),
    'AUD': ('A$', 2),
    'EUR': ('€', 2),
    'GBP': ('£', 2),
    'CHF': ('CHF ', 2),
    'SEK': ('kr ', 2),
    'NOK': ('kr ', 2),
    'DKK': ('kr ', 2),
    'PLN': ('zł ', 2),
    'INR': ('₹', 2),
    'BRL': ('R$', 2),
    'MXN': ('MX$', 2),
    'ZAR': ('R ', 2),
    'JPY': ('¥', 0),
    'KRW': ('₩', 0),
}

DEFAULT_FRACTION_DIGITS = 2


def default_fraction_digits(currency: str) -> int:
    try:
        return CURRENCIES[currency.upper()][1]
    except (KeyError, AttributeError):
        logger.warning(f"Unknown currency {currency!r}; using {DEFAULT_FRACTION_DIGITS} fraction digits")
        return DEFAULT_FRACTION_DIGITS


class CurrencyFormatter:
    """
    Format monetary values for display.

    Examples:
        >>> CurrencyFormatter('USD').format(1234.5)
        '$1234.50'
        >>> CurrencyFormatter('USD', show_symbol=False, extra_digits=1).format(3.4567)
        '3.457'
    """

    def __init__(self, currency: str = 'USD', fraction_digits: int = None,
                 show_symbol: bool = True, extra_digits: int = 0):
        self.currency = (currency or 'USD').upper()
        if fraction_digits is None:
            fraction_digits = default_fraction_digits(self.currency)
        self.fraction_digits = max(0, fraction_digits + extra_digits)
        self.show_symbol = show_symbol

    @property
    def symbol(self) -> str:
        entry = CURRENCIES.get(self.currency)
        return entry[0] if entry else f"{self.currency} "

    def format(self, value: float) -> str:
        # grouping separators are never used
        text = f"{abs(value):.{self.fraction_digits}f}"
        if self.show_symbol:
            text = f"{self.symbol}{text}"
        return f"-{text}" if value < 0 else text

    def __call__(self, value: float) -> str:
        return self.format(value)

    def __repr__(self):
        return (f"CurrencyFormatter(currency={self.currency!r}, "
                f"fraction_digits={self.fraction_digits}, show_symbol={self.show_symbol})")
