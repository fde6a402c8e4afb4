"""Typing metrics shared by the server and the client agent.

Both functions round halves upwards so that 2.5 becomes 3 on every client,
whatever language it is written in.
"""
import math


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def wpm(characters_typed, seconds_elapsed) -> int:
    """Words per minute, with a word counted as five characters.

    Returns 0 when no time has elapsed.
    """
    if not seconds_elapsed or seconds_elapsed <= 0:
        return 0
    return _round_half_up(characters_typed / 5 / (seconds_elapsed / 60))


def accuracy(correct_count, total_count) -> int:
    """Percentage of correct characters; 100 when nothing was typed."""
    if not total_count:
        return 100
    return _round_half_up(100 * correct_count / total_count)
