"""Single-bit helpers for byte-sized flag values."""


def set_bit(n: int, pos: int) -> int:
    """Return ``n`` with bit ``pos`` set."""
    return (n | (1 << pos)) & 0xFF


def clear_bit(n: int, pos: int) -> int:
    """Return ``n`` with bit ``pos`` cleared."""
    return n & ~(1 << pos) & 0xFF


def has_bit(n: int, pos: int) -> bool:
    """Tell whether bit ``pos`` of ``n`` is set."""
    return (n & (1 << pos)) > 0