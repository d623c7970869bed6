"""
Amount-in-words transcription for printed documents.

Uses the Indian numbering convention (thousand, lakh, crore) because the
documents are legally read in it. There is no locale switch:
the same integer always yields the same words.
"""

from decimal import ROUND_DOWN, Decimal

from erpdocs.utils.numbers import quantize_money

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
]
_TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
_TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety",
]

_THOUSAND = 1000
_LAKH = 100000
_CRORE = 10000000


def _below_hundred(num: int) -> str:
    if num < 10:
        return _ONES[num]
    if num < 20:
        return _TEENS[num - 10]
    if num % 10 == 0:
        return _TENS[num // 10]
    return f"{_TENS[num // 10]} {_ONES[num % 10]}"


def _spell(num: int) -> str:
    if num < 100:
        return _below_hundred(num)
    if num < _THOUSAND:
        head = f"{_ONES[num // 100]} Hundred"
        return head if num % 100 == 0 else f"{head} and {_below_hundred(num % 100)}"

    for size, label in ((_CRORE, "Crore"), (_LAKH, "Lakh"), (_THOUSAND, "Thousand")):
        if num >= size:
            head = f"{_spell(num // size)} {label}"
            return head if num % size == 0 else f"{head} {_spell(num % size)}"

    raise AssertionError("unreachable")  # pragma: no cover


def to_words(amount: int) -> str:
    """
    Spell out a non-negative integer.

    Args:
        amount: Whole amount, e.g. 272580

    Returns:
        Title-cased words, e.g. "Two Lakh Seventy Two Thousand Five Hundred and Eighty".
        Zero is "Zero". Amounts of a hundred crore and above repeat the crore
        group ("One Hundred Crore").

    Raises:
        TypeError: If amount is not an int
        ValueError: If amount is negative (documents never print negative amounts)
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError("amount in words is only defined for non-negative amounts")
    if amount == 0:
        return "Zero"
    return _spell(amount)


def amount_in_words(amount: Decimal, currency_label: str = "Rupees") -> str:
    """
    Build the printed amount-in-words line for a monetary amount.

    Paise are appended when present: "Rupees Ten and Fifty Paise Only".

    Args:
        amount: Non-negative monetary amount
        currency_label: Currency word printed before the amount

    Returns:
        The full sentence ending in "Only".
    """
    value = quantize_money(amount)
    whole = int(value.to_integral_value(rounding=ROUND_DOWN))
    paise = int((value - whole) * 100)

    words = f"{currency_label} {to_words(whole)}".strip()
    if paise:
        words += f" and {to_words(paise)} Paise"
    return f"{words} Only"
