"""
Human-readable byte sizes.

``parse_bytes("42 MB")`` -> 42000000, ``parse_bytes("42 mib")`` -> 44040192.
"""

# IEC sizes
BYTE = 1
KIBYTE = 1 << 10
MIBYTE = 1 << 20
GIBYTE = 1 << 30
TIBYTE = 1 << 40
PIBYTE = 1 << 50
EIBYTE = 1 << 60

# SI sizes
KBYTE = 1000
MBYTE = KBYTE * 1000
GBYTE = MBYTE * 1000
TBYTE = GBYTE * 1000
PBYTE = TBYTE * 1000
EBYTE = PBYTE * 1000

MAX_UINT64 = (1 << 64) - 1

BYTES_SIZE_TABLE = {
    "b": BYTE,
    "kib": KIBYTE,
    "kb": KBYTE,
    "mib": MIBYTE,
    "mb": MBYTE,
    "gib": GIBYTE,
    "gb": GBYTE,
    "tib": TIBYTE,
    "tb": TBYTE,
    "pib": PIBYTE,
    "pb": PBYTE,
    "eib": EIBYTE,
    "eb": EBYTE,
    # Without suffix
    "": BYTE,
    "ki": KIBYTE,
    "k": KBYTE,
    "mi": MIBYTE,
    "m": MBYTE,
    "gi": GIBYTE,
    "g": GBYTE,
    "ti": TIBYTE,
    "t": TBYTE,
    "pi": PIBYTE,
    "p": PBYTE,
    "ei": EIBYTE,
    "e": EBYTE,
}


def parse_bytes(text: str) -> int:
    """
    Parse a string representation of bytes into the number of bytes.

    Args:
        text: Size such as "100", "1,024 KB", "1.5GiB" or "64 mi"

    Returns:
        Number of bytes

    Raises:
        ValueError: If the number or the unit is not recognised
    """
    last_digit = 0
    for char in text:
        if not (char.isdigit() or char in ".,"):
            break
        last_digit += 1

    number = text[:last_digit].replace(",", "")
    try:
        value = float(number)
    except ValueError:
        raise ValueError(f"invalid size: {text!r}")

    unit = text[last_digit:].strip().lower()
    if unit not in BYTES_SIZE_TABLE:
        raise ValueError(f"unhandled size name: {unit!r}")

    value *= BYTES_SIZE_TABLE[unit]
    if value >= MAX_UINT64:
        raise ValueError(f"too large: {text!r}")
    return int(value)
