"""Per-filesystem filename normalization."""

import asyncio
import logging
import os
import sys
import unicodedata
from typing import Callable

logger = logging.getLogger(__name__)

Normalize = Callable[[str], str]


def _swapped_case_probe(path: str) -> tuple[str, str] | None:
    """Find the deepest component with cased letters; return (original, swapped) paths."""
    current = os.path.abspath(path)
    while True:
        head, tail = os.path.split(current)
        if tail and tail.swapcase() != tail:
            return current, os.path.join(head, tail.swapcase())
        if not tail or head == current:
            return None
        current = head


def _is_case_sensitive(path: str) -> bool:
    # Raises for missing or unreadable roots; the caller treats that root as unusable.
    os.stat(path)
    probe = _swapped_case_probe(path)
    if probe is None:
        return sys.platform not in ("win32", "darwin")
    original, swapped = probe
    try:
        return not os.path.samestat(os.stat(original), os.stat(swapped))
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.debug("case probe failed for %s: %s", swapped, e)
        return sys.platform not in ("win32", "darwin")


def make_normalize(
    case_sensitive: bool,
    *,
    separators: bool = True,
    unicode: bool = False,
    relative: bool = False,
) -> Normalize:
    """Build the comparison function for one filesystem."""

    def normalize(value: str) -> str:
        if unicode:
            value = unicodedata.normalize("NFC", value)
        if not case_sensitive:
            value = value.casefold()
        if separators:
            value = value.replace("\\", "/")
        if relative:
            while value.startswith("./") or value.startswith(".\\"):
                value = value[2:]
        return value

    return normalize


async def get_normalize_func(
    root: str,
    *,
    separators: bool = True,
    unicode: bool = False,
    relative: bool = False,
) -> Normalize:
    """Normalize function appropriate for the filesystem holding root."""
    case_sensitive = await asyncio.to_thread(_is_case_sensitive, root)
    logger.debug("normalization for %s: case_sensitive=%s", root, case_sensitive)
    return make_normalize(
        case_sensitive,
        separators=separators,
        unicode=unicode,
        relative=relative,
    )
