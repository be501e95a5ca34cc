"""Size units shared by the size column type and the CLI."""

UNITS = {
    "B": 1,
    "K": 1 << 10,
    "M": 1 << 20,
    "G": 1 << 30,
    "T": 1 << 40,
}


def unit_multiplier(unit: str) -> int:
    """Return the byte multiplier for a unit character (B, K, M, G, T).

    Raises:
        ValueError: If the unit is unknown
    """
    try:
        return UNITS[unit]
    except KeyError:
        raise ValueError(f"Invalid size unit: {unit}") from None


def format_size(size: int) -> str:
    """Format a size in bytes using the largest fitting unit, e.g. ``1.5K``.

    Whole multiples are written the way a size filter accepts them (``4K``).
    """
    for unit in "TGMK":
        multiplier = UNITS[unit]
        if abs(size) >= multiplier:
            whole, rest = divmod(size, multiplier)
            if rest == 0:
                return f"{whole}{unit}"
            return f"{size / multiplier:.1f}{unit}"
    return f"{size}B"
