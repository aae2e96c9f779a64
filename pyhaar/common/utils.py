"""
Common utility functions for the pyhaar project.
"""


def is_power_of_two(n: int) -> bool:
    """
    Checks whether n is a positive integral power of two (1, 2, 4, ...).

    Args:
        n: The value to check.

    Returns:
        True if n == 2**k for some k >= 0.
    """
    return n > 0 and (n & (n - 1)) == 0


def log2_int(n: int) -> int:
    """
    Integer base-2 logarithm of a power of two.

    Args:
        n: A power of two.

    Returns:
        k such that 2**k == n.
    """
    return n.bit_length() - 1
