"""
Field classification containers.

:class:`FieldClassification` is filled by the schema traversal and holds the
private/protected field paths of one model for both directions.
:class:`FilteredKeys` is the immutable pair of lists for one direction that
a compiled :class:`~django_restify.access.filter.Filter` owns.
"""

from dataclasses import dataclass, field
from typing import Iterable

from ..levels import AccessMode, parse_mode


@dataclass(frozen=True)
class FilteredKeys:
    """Private and protected field paths of one model, for one direction."""

    private: tuple[str, ...] = ()
    protected: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "private", tuple(self.private))
        object.__setattr__(self, "protected", tuple(self.protected))

    def prefixed(self, prefix: str) -> "FilteredKeys":
        return FilteredKeys(
            tuple(prefix + path for path in self.private),
            tuple(prefix + path for path in self.protected),
        )


@dataclass
class FieldClassification:
    """
    Mutable classification lists filled during traversal.

    A path is stored at most once per list and never in both the private
    and protected list of the same direction; private wins.
    """

    private: list[str] = field(default_factory=list)
    protected: list[str] = field(default_factory=list)
    write_private: list[str] = field(default_factory=list)
    write_protected: list[str] = field(default_factory=list)

    @classmethod
    def from_lists(
        cls,
        private: Iterable[str] = (),
        protected: Iterable[str] = (),
        write_private: Iterable[str] = (),
        write_protected: Iterable[str] = (),
    ) -> "FieldClassification":
        classification = cls()
        for path in private:
            classification.add(AccessMode.READ, "private", path)
        for path in protected:
            classification.add(AccessMode.READ, "protected", path)
        for path in write_private:
            classification.add(AccessMode.WRITE, "private", path)
        for path in write_protected:
            classification.add(AccessMode.WRITE, "protected", path)
        return classification

    def _lists(self, mode: AccessMode) -> tuple[list[str], list[str]]:
        if mode == AccessMode.READ:
            return self.private, self.protected
        return self.write_private, self.write_protected

    def add(self, mode, level: str, path: str) -> None:
        """Classify ``path`` as ``level`` ("private" or "protected")."""
        private, protected = self._lists(parse_mode(mode))
        if level == "private":
            if path in protected:
                protected.remove(path)
            if path not in private:
                private.append(path)
        elif level == "protected":
            if path not in private and path not in protected:
                protected.append(path)
        else:
            raise ValueError(f"Unknown classification level: {level!r}")

    def merge(self, other: "FieldClassification", prefix: str = "") -> None:
        """Merge ``other`` into this classification, prefixing its paths."""
        for mode in AccessMode:
            other_private, other_protected = other._lists(mode)
            for path in other_private:
                self.add(mode, "private", prefix + path)
            for path in other_protected:
                self.add(mode, "protected", prefix + path)

    def keys_for(self, mode) -> FilteredKeys:
        private, protected = self._lists(parse_mode(mode))
        return FilteredKeys(tuple(private), tuple(protected))
