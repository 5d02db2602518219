"""
Expected-status-code matching.

The expected-codes string is a comma-separated list of terms, each either a single
code (``200``) or an inclusive range (``200-299``). A code is accepted if
it satisfies any term.
"""

from typing import Optional, Tuple


def _parse_term(term: str) -> Optional[Tuple[int, int]]:
    """Return the inclusive (low, high) bounds of one term, or None if malformed."""
    term = term.strip()
    if not term:
        return None

    if "-" in term:
        low_text, high_text = term.split("-", 1)
        try:
            return int(low_text.strip()), int(high_text.strip())
        except ValueError:
            return None

    try:
        code = int(term)
    except ValueError:
        return None
    return code, code


def check_status_code(status_code: int, expected_status_codes: str) -> bool:
    """
    Check whether *status_code* matches the expected-codes string.

    Malformed terms are skipped. A range whose lower bound exceeds its
    upper bound matches nothing.

    >>> check_status_code(204, "200-299")
    True
    >>> check_status_code(403, "200,201,404-410")
    False
    """
    for part in (expected_status_codes or "").split(","):
        bounds = _parse_term(part)
        if bounds is None:
            continue
        low, high = bounds
        if low <= status_code <= high:
            return True
    return False
