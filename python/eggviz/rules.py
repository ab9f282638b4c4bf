"""
The ordered list of rewrite rules the user is editing.

Rows are either pending (still editable) or confirmed (locked in). Only confirmed rows are used when a session starts,
and their order defines the rule indices used to apply a single rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable


__all__ = ["Confirmed", "Pending", "RuleEntry", "RuleSetEditor"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pending:
    left: str = ""
    right: str = ""

    @property
    def valid(self) -> bool:
        return bool(self.left.strip() and self.right.strip())


@dataclass(frozen=True)
class Confirmed:
    left: str
    right: str


RuleEntry: TypeAlias = Pending | Confirmed


class RuleSetEditor:
    """
    Edits that do not apply, like confirming a row with an empty side, leave the list unchanged and return False. An
    index outside the list, negative ones included, raises `IndexError`.

    While frozen (during a session), every change is ignored.
    """

    def __init__(self, entries: Iterable[RuleEntry] = ()) -> None:
        self._entries: list[RuleEntry] = list(entries)
        self.frozen = False

    @property
    def entries(self) -> tuple[RuleEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> RuleEntry:
        return self._entries[index]

    def _entry(self, index: int) -> RuleEntry:
        if not 0 <= index < len(self._entries):
            msg = f"No rule at index {index}, there are {len(self._entries)} rules"
            raise IndexError(msg)
        return self._entries[index]

    def _mutable(self, action: str) -> bool:
        if self.frozen:
            logger.warning("Ignoring %s, rules are frozen while a session is running", action)
        return not self.frozen

    def add_pending(self, left: str = "", right: str = "") -> int | None:
        """
        Appends an editable row and returns its index.
        """
        if not self._mutable("add"):
            return None
        self._entries.append(Pending(left, right))
        return len(self._entries) - 1

    def update(self, index: int, left: str | None = None, right: str | None = None) -> bool:
        entry = self._entry(index)
        if not isinstance(entry, Pending) or not self._mutable("update"):
            return False
        self._entries[index] = replace(
            entry, left=entry.left if left is None else left, right=entry.right if right is None else right
        )
        return True

    def pending_valid(self, index: int) -> bool:
        entry = self._entry(index)
        return isinstance(entry, Pending) and entry.valid

    def confirm(self, index: int) -> bool:
        """
        Locks in a pending row. Rows with an empty side are left pending.
        """
        entry = self._entry(index)
        if not isinstance(entry, Pending) or not entry.valid or not self._mutable("confirm"):
            return False
        self._entries[index] = Confirmed(entry.left.strip(), entry.right.strip())
        return True

    def remove(self, index: int) -> bool:
        self._entry(index)
        if not self._mutable("remove"):
            return False
        del self._entries[index]
        return True

    def clear(self) -> bool:
        if not self._mutable("clear"):
            return False
        self._entries.clear()
        return True

    def load(self, pairs: Iterable[tuple[str, str]]) -> bool:
        """
        Replaces all rows with confirmed ones.
        """
        if not self._mutable("load"):
            return False
        self._entries = [Confirmed(left, right) for left, right in pairs]
        return True

    def freeze(self) -> None:
        self.frozen = True

    def unfreeze(self) -> None:
        self.frozen = False

    def ready_to_start(self) -> bool:
        return any(isinstance(entry, Confirmed) for entry in self._entries)

    def snapshot_confirmed(self) -> list[tuple[str, str]]:
        return [(entry.left, entry.right) for entry in self._entries if isinstance(entry, Confirmed)]
