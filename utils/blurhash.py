"""
utils/blurhash.py
-----------------
Validity check for BlurHash placeholders, backed by the `blurhash` package.

A hash is accepted when its header decodes to a component count and the
whole string decodes; a 1x1 decode is enough to touch every component
without rendering a real image. Computing hashes from images is the
uploader's job, not this backend's.
"""

from typing import Callable

import blurhash

BlurHashChecker = Callable[[str], bool]


def components(blur_hash: str) -> tuple[int, int]:
    """
    Number of X and Y components encoded in ``blur_hash``.

    Raises:
        ValueError: If the hash is malformed.
    """
    try:
        blurhash.decode(blur_hash, 1, 1)
        return blurhash.components(blur_hash)
    except TypeError as e:
        raise ValueError(f"blurhash must be a string: {e}") from e


def is_valid(blur_hash: str) -> bool:
    """True when ``blur_hash`` decodes cleanly."""
    try:
        components(blur_hash)
    except ValueError:
        return False
    return True
