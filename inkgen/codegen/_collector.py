"""
 * Copyright(c) 2022 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""

import logging
from hashlib import md5
from typing import Dict, List, Optional, Sequence, Union

from ..errors import NameCollisionError
from .resolved import (
    Expression, Scalar, ByteList, BitList, ListOf, FixedList, Group, Nullable, Outcome,
    DeclarationRef, ResolvedField, ResolvedCase, references
)


log = logging.getLogger(__name__)

Member = Union[ResolvedField, ResolvedCase]


class Candidate:
    """A struct or enum the resolver wants declared, before it has a name."""

    def __init__(self, ref: DeclarationRef, kind: str, members: Sequence[Member],
                 path: Sequence[str] = (), name_hints: Sequence[str] = (), docs: Sequence[str] = ()) -> None:
        assert kind in ("struct", "union")
        self.ref = ref
        self.kind = kind
        self.members = list(members)
        self.path = tuple(path)
        self.name_hints = list(dict.fromkeys(name_hints))
        self.docs = tuple(docs)

    @property
    def type_id(self) -> int:
        return self.ref.type_id

    def __repr__(self) -> str:
        return f"Candidate({self.type_id}, {self.kind}, {'::'.join(self.path)})"


class Declaration:
    """A named declaration in the generated module.

    Attributes
    ----------
    name: str
        The unique generated name.
    kind: str
        ``struct`` for record shapes, ``union`` for tagged unions.
    members: List[ResolvedField] or List[ResolvedCase]
        Fields or cases in source order.
    fingerprint: str
        Hex digest over the resolved shape, independent of path and name.
    type_ids: List[int]
        Every TypeId that resolved to this declaration, first one first.
    """

    def __init__(self, name: str, kind: str, members: Sequence[Member], fingerprint: str,
                 path: Sequence[str], type_ids: Sequence[int], docs: Sequence[str] = ()) -> None:
        self.name = name
        self.kind = kind
        self.members = list(members)
        self.fingerprint = fingerprint
        self.path = tuple(path)
        self.type_ids = list(type_ids)
        self.docs = tuple(docs)

    @property
    def path_text(self) -> str:
        return "::".join(self.path) or f"<type {self.type_ids[0]}>"

    @property
    def fields(self) -> List[ResolvedField]:
        assert self.kind == "struct"
        return self.members

    @property
    def cases(self) -> List[ResolvedCase]:
        assert self.kind == "union"
        return self.members

    def expressions(self) -> List[Expression]:
        if self.kind == "struct":
            return [f.expr for f in self.members]
        return [f.expr for c in self.members for f in c.fields]

    def dependencies(self) -> List["Declaration"]:
        """Declarations referenced from this one, in order of first use, itself included
        when self-referential."""
        out: Dict[int, Declaration] = {}
        for ref in references(self.expressions()):
            out.setdefault(id(ref.declaration), ref.declaration)
        return list(out.values())

    def __repr__(self) -> str:
        return f"Declaration({self.name}, {self.kind}, {self.fingerprint[:8]})"


class DeclarationCollector:
    """Interns declaration candidates by structural fingerprint and hands out unique names.
    State lives for one generation run only."""

    def __init__(self, collision_limit: int = 64) -> None:
        self.collision_limit = collision_limit
        self.declarations: List[Declaration] = []
        self._by_fingerprint: Dict[str, Declaration] = {}
        self._by_name: Dict[str, Optional[Declaration]] = {}
        self._reserved: Dict[str, str] = {}

    def reserve(self, name: str, owner: str = "module surface") -> None:
        """Keep a name away from custom types."""
        if self._by_name.get(name) is not None:
            raise NameCollisionError(name, [owner, self._by_name[name].path_text],
                                     f"Name '{name}' is already taken by a declaration")
        self._by_name[name] = None
        self._reserved[name] = owner

    def lookup(self, name: str) -> Optional[Declaration]:
        return self._by_name.get(name)

    @classmethod
    def canonical(cls, expr: Expression, group: Dict[int, int]) -> str:
        if isinstance(expr, DeclarationRef):
            if expr.type_id in group:
                return f"@{group[expr.type_id]}"
            if not expr.bound:
                raise RuntimeError(f"Reference to type {expr.type_id} escaped its component unbound")
            return "#" + expr.declaration.fingerprint
        elif isinstance(expr, Scalar):
            return expr.kind
        elif isinstance(expr, ByteList):
            return "bytes" if expr.length is None else f"bytes[{expr.length}]"
        elif isinstance(expr, BitList):
            return "bits"
        elif isinstance(expr, ListOf):
            return f"list<{cls.canonical(expr.element, group)}>"
        elif isinstance(expr, FixedList):
            return f"array<{cls.canonical(expr.element, group)};{expr.length}>"
        elif isinstance(expr, Group):
            return "(" + ",".join(cls.canonical(e, group) for e in expr.elements) + ")"
        elif isinstance(expr, Nullable):
            return f"option<{cls.canonical(expr.inner, group)}>"
        elif isinstance(expr, Outcome):
            ok, err = cls.canonical(expr.ok, group), cls.canonical(expr.err, group)
            return f"result<{ok},{err};{','.join(expr.names)}>"
        raise TypeError(f"Cannot fingerprint {expr!r}")

    @classmethod
    def _canonical_fields(cls, fields: Sequence[ResolvedField], group: Dict[int, int]) -> str:
        return ",".join(f"{f.name}:{cls.canonical(f.expr, group)}" for f in fields)

    @classmethod
    def canonical_candidate(cls, candidate: Candidate, group: Dict[int, int]) -> str:
        if candidate.kind == "struct":
            return "struct{" + cls._canonical_fields(candidate.members, group) + "}"
        return "union{" + "|".join(
            f"{c.name}={c.index}({cls._canonical_fields(c.fields, group)})" for c in candidate.members
        ) + "}"

    def intern(self, candidate: Candidate) -> Declaration:
        """Intern a candidate whose references are all bound already."""
        canon = self.canonical_candidate(candidate, {})
        return self._register(candidate, md5(canon.encode("utf-8")).hexdigest())

    def intern_component(self, candidates: Sequence[Candidate]) -> List[Declaration]:
        """Intern a strongly connected group of candidates that reference each other. The
        group is hashed as a whole, in-group references by position, and every member
        fingerprint is derived from the group hash."""
        if len(candidates) == 1 and not self._self_referencing(candidates[0]):
            return [self.intern(candidates[0])]

        group = {c.type_id: k for k, c in enumerate(candidates)}
        digest = md5(
            "\n".join(self.canonical_candidate(c, group) for c in candidates).encode("utf-8")
        ).hexdigest()

        return [
            self._register(c, md5(f"{digest}:{k}".encode("utf-8")).hexdigest())
            for k, c in enumerate(candidates)
        ]

    @staticmethod
    def _self_referencing(candidate: Candidate) -> bool:
        exprs = [f.expr for f in candidate.members] if candidate.kind == "struct" else \
            [f.expr for c in candidate.members for f in c.fields]
        return any(r.type_id == candidate.type_id for r in references(exprs))

    def _register(self, candidate: Candidate, fingerprint: str) -> Declaration:
        existing = self._by_fingerprint.get(fingerprint)
        if existing is not None:
            log.debug("Type %d is structurally identical to %s", candidate.type_id, existing.name)
            existing.type_ids.append(candidate.type_id)
            candidate.ref.bind(existing)
            return existing

        declaration = Declaration(
            name=self._name_for(candidate),
            kind=candidate.kind,
            members=candidate.members,
            fingerprint=fingerprint,
            path=candidate.path,
            type_ids=[candidate.type_id],
            docs=candidate.docs,
        )
        self._by_fingerprint[fingerprint] = declaration
        self._by_name[declaration.name] = declaration
        self.declarations.append(declaration)
        candidate.ref.bind(declaration)
        log.debug("Declared %s for type %d (%s)", declaration.name, candidate.type_id, declaration.path_text)
        return declaration

    def _name_for(self, candidate: Candidate) -> str:
        hints = candidate.name_hints or [f"Type{candidate.type_id}"]
        for hint in hints:
            if hint not in self._by_name:
                if hint != hints[0]:
                    log.debug("Name %s is taken, using %s for type %d", hints[0], hint, candidate.type_id)
                return hint

        base = hints[0]
        for n in range(2, self.collision_limit + 2):
            name = f"{base}{n}"
            if name not in self._by_name:
                log.debug("Name %s is taken, using %s for type %d", base, name, candidate.type_id)
                return name

        taken = self._by_name[base]
        raise NameCollisionError(
            base,
            [taken.path_text if taken is not None else self._reserved[base], "::".join(candidate.path)]
        )

