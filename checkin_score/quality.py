"""Format check for check-in messages."""

from __future__ import annotations

TARGET_LETTERS = "pantsoff"


def is_proper(message: str) -> bool:
    """Return True when the letters of ``pantsoff`` appear in order in the message.

    Matching is case-insensitive and any characters, line breaks included, may
    sit between the letters.
    """

    remaining = iter(message.lower())
    # each membership test consumes the iterator up to the match
    return all(letter in remaining for letter in TARGET_LETTERS)


__all__ = ["TARGET_LETTERS", "is_proper"]
