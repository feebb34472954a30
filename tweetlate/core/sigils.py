"""Protect handles, hashtags and links while text goes through translation.

Every non-translatable token is swapped for a positional placeholder
(``XZ0``, ``XZ1``, ...) before translation and swapped back afterwards.
Placeholders use an alphabet translation services tend to leave alone, but a
service that rewrites one anyway produces cosmetic damage rather than an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence

SIGIL_PREFIX = "XZ"

# Literal placeholder look-alikes in the input are masked as well so that
# restoring never rewrites text the author actually wrote.
_TOKEN_RE = re.compile(
    r"[@#]\w+"
    r"|[A-Za-z][A-Za-z0-9+.\-]*://\S+"
    rf"|{SIGIL_PREFIX}\d+"
)
_SIGIL_RE = re.compile(rf"{SIGIL_PREFIX}(\d+)")


@dataclass(frozen=True, slots=True)
class MaskedText:
    template: str
    tokens: List[str] = field(default_factory=list)


def mk_sigil(index: int) -> str:
    return f"{SIGIL_PREFIX}{index}"


def mask(text: str) -> MaskedText:
    """Replace tokens left to right with ``XZ<i>`` placeholders."""
    tokens: List[str] = []

    def _swap(match: re.Match) -> str:
        tokens.append(match.group(0))
        return mk_sigil(len(tokens) - 1)

    template = _TOKEN_RE.sub(_swap, text)
    return MaskedText(template=template, tokens=tokens)


def unmask(template: str, tokens: Sequence[str]) -> str:
    """Put the original tokens back. Unknown placeholders are left as they are."""
    if not tokens:
        return template

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(tokens):
            return tokens[index]
        return match.group(0)

    return _SIGIL_RE.sub(_restore, template)


__all__ = ["MaskedText", "SIGIL_PREFIX", "mask", "unmask", "mk_sigil"]
