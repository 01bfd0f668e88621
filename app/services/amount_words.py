from decimal import ROUND_HALF_UP, Decimal

_ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
_TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]
_SCALES = ["", "Thousand", "Million", "Billion", "Trillion"]


def _group_to_words(number: int) -> str:
    words = []
    hundreds, remainder = divmod(number, 100)
    if hundreds:
        words.append(f"{_ONES[hundreds]} Hundred")
    if remainder >= 20:
        tens, ones = divmod(remainder, 10)
        words.append(_TENS[tens])
        if ones:
            words.append(_ONES[ones])
    elif remainder >= 10:
        words.append(_TEENS[remainder - 10])
    elif remainder:
        words.append(_ONES[remainder])
    return " ".join(words)


def integer_to_words(number: int) -> str:
    if number < 0:
        raise ValueError("Amounts in words must not be negative.")
    if number == 0:
        return "Zero"

    groups = []
    scale = 0
    while number:
        if scale >= len(_SCALES):
            raise ValueError("Amount too large to spell out.")
        number, chunk = divmod(number, 1000)
        if chunk:
            groups.append(f"{_group_to_words(chunk)} {_SCALES[scale]}".strip())
        scale += 1
    return " ".join(reversed(groups))


def amount_to_words(amount) -> str:
    """10500 -> 'Ten Thousand Five Hundred Dollars And Zero Cents'"""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    dollars = int(value)
    cents = int((value - dollars) * 100)
    return f"{integer_to_words(dollars)} Dollars And {integer_to_words(cents)} Cents"
