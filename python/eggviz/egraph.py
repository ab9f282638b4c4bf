"""
Small e-graph over lisp terms, with e-node ids that stay stable across rewrites.

E-node ids are handed out once and never reused. An e-node only loses its id when rebuilding finds it congruent to an
older e-node, in which case the older one is kept. Class ids are union-find representatives, the smaller id always
wins a union, so merged away classes disappear and the surviving class keeps its id.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from typing_extensions import assert_never

from .lispy import Call, Rule, Term, Var
from .snapshot import EClassId, ENode, ENodeId, GraphSnapshot, InvariantViolation

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


__all__ = ["EGraph", "Subst", "UnionFind"]

logger = logging.getLogger(__name__)

Subst = dict[str, EClassId]


@dataclass
class UnionFind:
    parents: dict[EClassId, EClassId] = field(default_factory=dict)

    def make(self, id: EClassId) -> None:
        self.parents[id] = id

    def find(self, id: EClassId) -> EClassId:
        parents = self.parents
        while parents[id] != id:
            parents[id] = parents[parents[id]]
            id = parents[id]
        return id

    def union(self, a: EClassId, b: EClassId) -> EClassId:
        a, b = self.find(a), self.find(b)
        leader, follower = min(a, b), max(a, b)
        self.parents[follower] = leader
        return leader


@dataclass
class EGraph:
    uf: UnionFind = field(default_factory=UnionFind)
    # Only canonical class ids are keys
    members: dict[EClassId, list[ENodeId]] = field(default_factory=dict)
    nodes: dict[ENodeId, ENode] = field(default_factory=dict)
    # May point to a merged away class, always go through `find`
    class_of: dict[ENodeId, EClassId] = field(default_factory=dict)
    hashcons: dict[ENode, ENodeId] = field(default_factory=dict)
    _class_ids: Iterator[int] = field(default_factory=itertools.count, repr=False)
    _node_ids: Iterator[int] = field(default_factory=itertools.count, repr=False)

    def find(self, eclass: EClassId) -> EClassId:
        return self.uf.find(eclass)

    def add(self, label: str, children: Iterable[EClassId] = ()) -> EClassId:
        enode = ENode(label, tuple(map(self.find, children)))
        existing = self.hashcons.get(enode)
        if existing is not None:
            return self.find(self.class_of[existing])
        eclass = next(self._class_ids)
        node_id = next(self._node_ids)
        self.uf.make(eclass)
        self.members[eclass] = [node_id]
        self.nodes[node_id] = enode
        self.class_of[node_id] = eclass
        self.hashcons[enode] = node_id
        return eclass

    def add_term(self, term: Term, subst: Mapping[str, EClassId] | None = None) -> EClassId:
        match term:
            case Var(name):
                if subst is None or name not in subst:
                    msg = f"Unbound generic variable '{name}'"
                    raise InvariantViolation(msg)
                return self.find(subst[name])
            case Call(name, args):
                return self.add(name, [self.add_term(arg, subst) for arg in args])
            case _:
                assert_never(term)

    def union(self, a: EClassId, b: EClassId) -> bool:
        """
        Merges two classes, returning whether they were distinct. Call `rebuild` afterwards to restore congruence.
        """
        a, b = self.find(a), self.find(b)
        if a == b:
            return False
        leader = self.uf.union(a, b)
        follower = b if leader == a else a
        self.members[leader].extend(self.members.pop(follower))
        return True

    def rebuild(self) -> None:
        """
        Re-canonicalizes every e-node, merging the classes of congruent e-nodes and dropping the newer duplicate,
        until nothing changes.
        """
        while True:
            merged = False
            self.hashcons = {}
            for node_id in sorted(self.nodes):
                old = self.nodes[node_id]
                enode = self.nodes[node_id] = ENode(old.label, tuple(map(self.find, old.children)))
                existing = self.hashcons.setdefault(enode, node_id)
                if existing == node_id:
                    continue
                merged |= self.union(self.class_of[existing], self.class_of[node_id])
                self._drop(node_id)
            if not merged:
                return

    def _drop(self, node_id: ENodeId) -> None:
        self.members[self.find(self.class_of.pop(node_id))].remove(node_id)
        del self.nodes[node_id]

    def ematch(self, pattern: Term) -> list[tuple[EClassId, Subst]]:
        """
        All distinct (class, substitution) pairs where the pattern matches a term in the class.
        """
        results: list[tuple[EClassId, Subst]] = []
        for eclass in sorted(self.members):
            seen = set()
            for subst in self._match(pattern, eclass, {}):
                key = tuple(sorted(subst.items()))
                if key not in seen:
                    seen.add(key)
                    results.append((eclass, subst))
        return results

    def _match(self, pattern: Term, eclass: EClassId, subst: Subst) -> Iterator[Subst]:
        match pattern:
            case Var(name):
                bound = subst.get(name)
                if bound is None:
                    yield {**subst, name: eclass}
                elif bound == eclass:
                    yield subst
            case Call(name, args):
                for node_id in self.members[eclass]:
                    enode = self.nodes[node_id]
                    if enode.label == name and len(enode.children) == len(args):
                        yield from self._match_args(args, enode.children, subst)

    def _match_args(self, patterns: tuple[Term, ...], children: tuple[EClassId, ...], subst: Subst) -> Iterator[Subst]:
        if not patterns:
            yield subst
            return
        for partial in self._match(patterns[0], self.find(children[0]), subst):
            yield from self._match_args(patterns[1:], children[1:], partial)

    def rewrite(self, rule: Rule) -> int:
        """
        Applies every current match of the rule, then rebuilds. Returns the number of matches applied.
        """
        matches = self.ematch(rule.lhs)
        for eclass, subst in matches:
            self.union(eclass, self.add_term(rule.rhs, subst))
        self.rebuild()
        logger.debug("Rewrite %s applied to %d matches", rule, len(matches))
        return len(matches)

    def extract(self, eclass: EClassId) -> Term:
        """
        Smallest term in the class, counting e-nodes.
        """
        best: dict[EClassId, tuple[int, Term]] = {}
        changed = True
        while changed:
            changed = False
            for candidate, node_ids in self.members.items():
                for node_id in node_ids:
                    enode = self.nodes[node_id]
                    args = [best.get(self.find(child)) for child in enode.children]
                    if None in args:
                        continue
                    cost = 1 + sum(arg[0] for arg in args)  # type: ignore[index]
                    if candidate not in best or cost < best[candidate][0]:
                        term = Call(enode.label, tuple(arg[1] for arg in args))  # type: ignore[index]
                        best[candidate] = (cost, term)
                        changed = True
        return best[self.find(eclass)][1]

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot.create(
            {
                eclass: [(node_id, self.nodes[node_id]) for node_id in sorted(self.members[eclass])]
                for eclass in sorted(self.members)
            }
        )
