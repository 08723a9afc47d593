"""String interning for repeated wire text.

Target names, field names and source locations repeat across thousands of
tasks. The pool hands out one shared ``InternedStr`` per distinct text and
counts how many holders reference it, so a sweep can drop text nobody uses
any more.

Usage:
    strings = Strings()
    name = strings.string("task.name")    # acquires a reference
    ...
    strings.release(name)                 # holder is done with it
    strings.retain_referenced()           # sweep unreferenced text
"""

from __future__ import annotations

from functools import total_ordering


@total_ordering
class InternedStr:
    """Immutable handle to pooled text.

    Equality, ordering and hashing follow the underlying text, so handles
    compare equal to each other and to plain ``str`` values.
    """

    __slots__ = ("_text", "_refs")

    def __init__(self, text: str) -> None:
        self._text = text
        self._refs = 0

    @property
    def refs(self) -> int:
        """Number of holders currently referencing this text."""
        return self._refs

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"InternedStr({self._text!r})"

    def __hash__(self) -> int:
        return hash(self._text)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InternedStr):
            return self._text == other._text
        if isinstance(other, str):
            return self._text == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, InternedStr):
            return self._text < other._text
        if isinstance(other, str):
            return self._text < other
        return NotImplemented

    def __len__(self) -> int:
        return len(self._text)


class Strings:
    """Reference-counted interning pool."""

    def __init__(self) -> None:
        self._strings: dict[str, InternedStr] = {}

    def string(self, text: str) -> InternedStr:
        """Return the canonical handle for ``text``, acquiring one reference."""
        handle = self._strings.get(text)
        if handle is None:
            handle = InternedStr(text)
            self._strings[text] = handle
        handle._refs += 1
        return handle

    def acquire(self, handle: InternedStr) -> InternedStr:
        """Take another reference on an existing handle."""
        handle._refs += 1
        return handle

    def release(self, handle: InternedStr) -> None:
        """Drop one reference. The text stays pooled until the next sweep."""
        if handle._refs > 0:
            handle._refs -= 1

    def release_all(self, handles) -> None:
        for handle in handles:
            self.release(handle)

    def retain_referenced(self) -> int:
        """Remove every handle with no remaining references.

        Returns:
            Number of strings removed.
        """
        dead = [text for text, handle in self._strings.items() if handle._refs == 0]
        for text in dead:
            del self._strings[text]
        return len(dead)

    def get(self, text: str) -> InternedStr | None:
        """Look up pooled text without acquiring a reference."""
        return self._strings.get(text)

    def __contains__(self, text: object) -> bool:
        return str(text) in self._strings

    def __len__(self) -> int:
        return len(self._strings)


__all__ = ["InternedStr", "Strings"]
