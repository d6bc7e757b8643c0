"""
HammerBot - Phrase Policy
=========================

Decides whether a chat line is sanctionable.

The engine only depends on the PhraseMatcher protocol, so the exact-match
list can be replaced by a smarter matcher without touching the engine.
"""

from typing import FrozenSet, Iterable, Protocol, runtime_checkable


@runtime_checkable
class PhraseMatcher(Protocol):
    """Anything with ``matches(text) -> bool``."""

    def matches(self, text: str) -> bool:
        ...


class BannedPhraseMatcher:
    """
    Exact, case-sensitive equality against a fixed set of phrases.

    No substring, fuzzy or regex matching. Callers trim the text first.
    """

    def __init__(self, phrases: Iterable[str]) -> None:
        self.phrases: FrozenSet[str] = frozenset(phrases)

    def matches(self, text: str) -> bool:
        return text in self.phrases

    def __len__(self) -> int:
        return len(self.phrases)


__all__ = [
    "BannedPhraseMatcher",
    "PhraseMatcher",
]
