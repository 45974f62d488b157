"""
Percentage helpers shared by the reconcilers.
"""


def round_percent(numerator: int, denominator: int) -> int:
    """
    Integer percentage numerator / denominator * 100, halves rounded up.

    Uses exact integer arithmetic; callers guarantee denominator > 0.
    """
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (200 * numerator + denominator) // (2 * denominator)


def safe_percent(numerator: int, denominator: int, default: int = 0) -> int:
    """round_percent that returns `default` when the denominator is zero."""
    if denominator == 0:
        return default
    return round_percent(numerator, denominator)
