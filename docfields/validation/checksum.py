"""Check-letter validation for Spanish NIF and NIE identity numbers.

Both numbers end in a letter taken from a 23-entry table indexed by the
numeric part modulo 23. For an NIE the leading X/Y/Z stands for the
digit 0/1/2. All validators return ``False`` for malformed input instead
of raising.
"""

from typing import Any

CHECK_LETTERS = "TRWAGMYFPDXBNJZSQVHLCKE"

NIE_PREFIXES: dict[str, str] = {"X": "0", "Y": "1", "Z": "2"}

_CODE_LENGTH = 9


def _is_ascii_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


def _check_letter_matches(number: str, letter: str) -> bool:
    if not _is_ascii_digits(number):
        return False
    return CHECK_LETTERS[int(number) % 23] == letter


def validate_nif(code: Any) -> bool:
    """Validate a NIF (eight digits followed by a check letter).

    Args:
        code: Candidate NIF, e.g. ``"12345678Z"``.

    Returns:
        True if the check letter matches the number.
    """
    if not isinstance(code, str) or len(code) != _CODE_LENGTH:
        return False
    return _check_letter_matches(code[:8], code[8])


def validate_nie(code: Any) -> bool:
    """Validate a NIE (X/Y/Z, seven digits and a check letter).

    Args:
        code: Candidate NIE, e.g. ``"X1234567L"``.

    Returns:
        True if the check letter matches the prefixed number.
    """
    if not isinstance(code, str) or len(code) != _CODE_LENGTH:
        return False
    prefix = NIE_PREFIXES.get(code[0])
    if prefix is None:
        return False
    return _check_letter_matches(prefix + code[1:8], code[8])


def validate_identity_number(code: Any) -> bool:
    """Validate either kind of identity number, dispatching on the first character."""
    if isinstance(code, str) and code[:1] in NIE_PREFIXES:
        return validate_nie(code)
    return validate_nif(code)
