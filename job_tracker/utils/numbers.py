"""Small numeric helpers shared by the stats endpoints"""
import math


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when there is nothing to divide by"""
    if not whole:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))
