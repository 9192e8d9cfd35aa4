"""
Amount formatting for customer facing messages.
"""


def format_amount(value: float) -> str:
    """
    Renders an amount exactly as stored: whole values without a decimal part,
    others with every stored digit (1500000 -> "1500000", 1234.567 -> "1234.567").
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)
