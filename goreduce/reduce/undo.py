"""Reversible tree edits.

Every mutation a rule makes is an attribute assignment on a node. List
children are never edited in place; a rule installs a new list instead, so
one Edit record is enough to put any change back.
"""

from __future__ import annotations

from dataclasses import dataclass


class InvariantError(Exception):
    """An undo found the tree in a state its own edits did not leave."""


@dataclass
class Edit:
    """owner.attr was changed from old to new."""

    owner: object
    attr: str
    old: object
    new: object

    def revert(self) -> None:
        current = getattr(self.owner, self.attr)
        if current is not self.new:
            raise InvariantError(
                "cannot undo "
                + type(self.owner).__name__
                + "."
                + self.attr
                + ": slot no longer holds the value this edit installed"
            )
        setattr(self.owner, self.attr, self.old)


class Undo:
    """The inverse of a group of edits. Calling it reverts them newest first."""

    def __init__(self) -> None:
        self.edits: list[Edit] = []

    def __len__(self) -> int:
        return len(self.edits)

    def __call__(self) -> None:
        while len(self.edits) > 0:
            self.edits.pop().revert()

    def set(self, owner: object, attr: str, value: object) -> None:
        """Assign owner.attr = value and remember how to take it back."""
        old = getattr(owner, attr)
        setattr(owner, attr, value)
        self.edits.append(Edit(owner, attr, old, value))

    def extend(self, other: Undo) -> Undo:
        """Append other's edits, which then revert before this undo's own."""
        self.edits.extend(other.edits)
        other.edits = []
        return self

    def discard(self) -> None:
        """Commit: forget the edits without reverting them."""
        self.edits = []


def compose(*undos: Undo) -> Undo:
    """One undo reverting all of undos, the last one first."""
    result = Undo()
    for undo in undos:
        result.extend(undo)
    return result
