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

import sys
import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from ..config import Conventions
from ..errors import RecursionLimitExceededError
from ..registry import types as rt
from ..registry.contract import TypeRegistry
from ._collector import Candidate, DeclarationCollector
from ._naming import join_path, pascal_case, type_name
from .resolved import (
    Expression, Scalar, ByteList, BitList, ListOf, FixedList, Group, Nullable, Outcome,
    DeclarationRef, ResolvedField, ResolvedCase, UNIT
)


log = logging.getLogger(__name__)


_primitive_mapping: Dict[str, Expression] = {
    "bool": Scalar("boolean"),
    "char": Scalar("string"),
    "str": Scalar("string"),
    **{k: Scalar("number") for k in rt.SMALL_INTEGERS},
    **{k: Scalar("bignumber") for k in rt.LARGE_INTEGERS},
}

# Interpreter frames one nesting level of types may take, a struct field is the worst case:
# _visit, _dispatch, _composite, _nominal, the members callback, _fields.
FRAMES_PER_LEVEL = 8


@contextmanager
def recursion_headroom(levels: int) -> Iterator[None]:
    """Raise the interpreter recursion limit far enough for ``levels`` more nested types
    than the stack already holds, restoring it on exit."""
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(limit + levels * FRAMES_PER_LEVEL)
    try:
        yield
    finally:
        sys.setrecursionlimit(limit)


class _Frame:
    """One type on the resolution call stack. Struct and enum frames carry the reference
    handed out to anything that reaches them again before they are declared."""

    def __init__(self, type_id: int, index: int) -> None:
        self.type_id: int = type_id
        self.index: int = index
        self.lowlink: int = index
        self.ref: Optional[DeclarationRef] = None
        self.candidate: Optional[Candidate] = None

    def __repr__(self) -> str:
        return f"_Frame({self.type_id}, {self.index}, low={self.lowlink})"


class TypeResolver:
    """Resolves TypeIds to expressions, memoized for the lifetime of the resolver.

    Struct and enum types are nominal: entering one hands out a :class:`DeclarationRef`
    right away, so reaching the same type again while it is being resolved yields that
    reference instead of recursing. Types that reference each other form strongly connected
    groups (tracked with lowlinks while walking) and are declared together once the group
    is complete, which lets their fingerprints describe the whole cycle.

    Inline types (lists, tuples, options...) have no name to fall back on. Reaching one
    again while it is still being resolved is fine as long as a struct or enum sits in
    between, the inline type is then resolved once more and stops at that declaration.
    Anything else is a cycle that cannot be expressed and raises
    :class:`RecursionLimitExceededError`, as does exceeding ``max_depth``.
    """

    def __init__(self, registry: TypeRegistry, collector: DeclarationCollector,
                 conventions: Optional[Conventions] = None, max_depth: int = 256) -> None:
        self.registry = registry
        self.collector = collector
        self.conventions = conventions or Conventions()
        self.max_depth = max_depth

        self._memo: Dict[int, Expression] = {}
        self._calls: List[_Frame] = []
        self._open: Dict[int, _Frame] = {}
        self._pending: List[_Frame] = []
        self._pending_inline: Dict[int, Tuple[Expression, int]] = {}
        self._counter = 0

    def resolve(self, type_id: int) -> Expression:
        """Resolve a TypeId. Calling this again with the same TypeId returns the same instance.

        Raises
        ------
        RecursionLimitExceededError
            Nesting deeper than ``max_depth``, or a cycle without a struct or enum on it.
        """
        with recursion_headroom(self.max_depth):
            try:
                expr = self._visit(type_id)
            except RecursionError as e:
                raise RecursionLimitExceededError(
                    [type_id], "Type resolution exhausted the interpreter stack"
                ) from e
        assert not self._open and not self._pending and not self._pending_inline
        return expr

    def resolved(self, type_id: int) -> bool:
        return type_id in self._memo

    def __len__(self) -> int:
        return len(self._memo)

    def _chain(self, type_id: Optional[int] = None) -> List[int]:
        return [f.type_id for f in self._calls] + ([type_id] if type_id is not None else [])

    def _visit(self, type_id: int) -> Expression:
        if type_id in self._memo:
            return self._memo[type_id]

        caller = self._calls[-1] if self._calls else None

        frame = self._open.get(type_id)
        if frame is not None:
            if caller is not None:
                caller.lowlink = min(caller.lowlink, frame.index)
            return frame.ref

        if type_id in self._pending_inline:
            expr, lowlink = self._pending_inline[type_id]
            if caller is not None:
                caller.lowlink = min(caller.lowlink, lowlink)
            return expr

        definition = self.registry[type_id]

        if any(f.type_id == type_id for f in self._calls):
            self._check_reentry(type_id)

        if len(self._calls) >= self.max_depth:
            raise RecursionLimitExceededError(
                self._chain(type_id), f"Type resolution exceeded the maximum depth of {self.max_depth}"
            )

        frame = _Frame(type_id, self._counter)
        self._counter += 1
        self._calls.append(frame)
        try:
            expr = self._dispatch(frame, definition)
        finally:
            self._calls.pop()

        if caller is not None:
            caller.lowlink = min(caller.lowlink, frame.lowlink)

        if frame.ref is not None:
            return expr

        if frame.lowlink < frame.index:
            # Depends on a declaration group that is still open.
            self._pending_inline[type_id] = (expr, frame.lowlink)
            return expr
        return self._memo.setdefault(type_id, expr)

    def _check_reentry(self, type_id: int) -> None:
        last = max(i for i, f in enumerate(self._calls) if f.type_id == type_id)
        if not any(f.ref is not None for f in self._calls[last + 1:]):
            raise RecursionLimitExceededError(
                [f.type_id for f in self._calls[last:]] + [type_id],
                "Cycle does not pass through a struct or enum declaration"
            )

    def _dispatch(self, frame: _Frame, definition: rt.TypeDef) -> Expression:
        if isinstance(definition, rt.Primitive):
            return _primitive_mapping[definition.kind]
        elif isinstance(definition, rt.Compact):
            return self._visit(definition.inner)
        elif isinstance(definition, rt.Sequence):
            if self._is_byte(definition.element):
                return ByteList()
            return ListOf(self._visit(definition.element))
        elif isinstance(definition, rt.Array):
            if self._is_byte(definition.element):
                return ByteList(definition.length)
            return FixedList(self._visit(definition.element), definition.length)
        elif isinstance(definition, rt.Tuple):
            if not definition.elements:
                return UNIT
            return Group([self._visit(e) for e in definition.elements])
        elif isinstance(definition, rt.BitSequence):
            return BitList()
        elif isinstance(definition, rt.Composite):
            return self._composite(frame, definition)
        elif isinstance(definition, rt.Variant):
            return self._variant(frame, definition)
        raise TypeError(f"No resolution for {definition!r}")

    def _composite(self, frame: _Frame, definition: rt.Composite) -> Expression:
        wrapped = self._byte_wrapper(definition)
        if wrapped is not None:
            if definition.name in self.conventions.address_names:
                return Scalar("string")
            if definition.name in self.conventions.hash_names:
                return ByteList(wrapped)

        return self._nominal(frame, definition, "struct", lambda: self._fields(definition.fields))

    def _variant(self, frame: _Frame, definition: rt.Variant) -> Expression:
        conv = self.conventions

        if conv.detect_option and self._matches(definition, conv.option_cases, "Option"):
            absent, present = (definition.case(n) for n in conv.option_cases)
            if not absent.fields and len(present.fields) == 1:
                return Nullable(self._visit(present.fields[0].type_id))

        if conv.detect_result and self._matches(definition, conv.result_cases, "Result"):
            ok, err = (definition.case(n) for n in conv.result_cases)
            if len(ok.fields) == 1 and len(err.fields) == 1:
                return Outcome(
                    self._visit(ok.fields[0].type_id), self._visit(err.fields[0].type_id), conv.result_cases
                )

        return self._nominal(frame, definition, "union", lambda: [
            ResolvedCase(c.name, c.index, self._fields(c.fields), c.docs) for c in definition.cases
        ])

    def _matches(self, definition: rt.Variant, names: Sequence[str], path_name: str) -> bool:
        if len(definition.cases) != 2 or {c.name for c in definition.cases} != set(names):
            return False
        return not self.conventions.require_path or definition.name == path_name

    def _nominal(self, frame: _Frame, definition: rt.TypeDef, kind: str,
                 members: Callable[[], list]) -> DeclarationRef:
        frame.ref = DeclarationRef(frame.type_id)
        self._open[frame.type_id] = frame
        self._pending.append(frame)

        frame.candidate = Candidate(
            frame.ref, kind, members(),
            path=definition.path,
            name_hints=self._name_hints(frame.type_id, definition),
            docs=definition.docs,
        )

        if frame.lowlink == frame.index:
            self._close(frame)
        return frame.ref

    def _close(self, root: _Frame) -> None:
        at = next(i for i in range(len(self._pending) - 1, -1, -1) if self._pending[i] is root)
        component = self._pending[at:]
        del self._pending[at:]

        if len(component) > 1:
            log.debug("Declaring mutually recursive types %s together", [f.type_id for f in component])
        self.collector.intern_component([f.candidate for f in component])

        for f in component:
            del self._open[f.type_id]
            self._memo[f.type_id] = f.ref

        for type_id, (expr, lowlink) in list(self._pending_inline.items()):
            if lowlink >= root.index:
                del self._pending_inline[type_id]
                self._memo.setdefault(type_id, expr)

    def _fields(self, fields: Sequence[rt.Field]) -> List[ResolvedField]:
        out = []
        for i, f in enumerate(fields):
            expr = self._visit(f.type_id)
            if f.name is not None:
                out.append(ResolvedField(f.name, expr, False, f.docs))
            elif len(fields) == 1:
                out.append(ResolvedField("value", expr, True, f.docs))
            else:
                out.append(ResolvedField(f"field{i}", expr, True, f.docs))
        return out

    def _strip_compact(self, type_id: int) -> rt.TypeDef:
        seen = set()
        definition = self.registry[type_id]
        while isinstance(definition, rt.Compact) and type_id not in seen:
            seen.add(type_id)
            type_id = definition.inner
            definition = self.registry[type_id]
        return definition

    def _is_byte(self, type_id: int) -> bool:
        definition = self._strip_compact(type_id)
        return isinstance(definition, rt.Primitive) and definition.kind == "u8"

    def _byte_wrapper(self, definition: rt.Composite) -> Optional[int]:
        """Length of the byte array a single field composite wraps, if that is its shape."""
        if len(definition.fields) != 1:
            return None
        inner = self._strip_compact(definition.fields[0].type_id)
        if isinstance(inner, rt.Array) and self._is_byte(inner.element):
            return inner.length
        return None

    def _name_hints(self, type_id: int, definition: rt.TypeDef) -> List[str]:
        if not definition.path:
            return [f"Type{type_id}"]

        base = type_name(definition.name)
        hints = [base]
        bound = [p.type_id for p in definition.params if p.type_id is not None]
        if bound:
            hints.append(base + "".join(self._param_label(t) for t in bound))
        if len(definition.path) > 1:
            hints.append(type_name(join_path(definition.path)))
        return hints

    def _param_label(self, type_id: int, depth: int = 0) -> str:
        definition = self.registry[type_id]
        if depth > 3:
            return "T"
        if definition.path:
            return pascal_case(definition.name)
        if isinstance(definition, rt.Primitive):
            return pascal_case(definition.kind)
        if isinstance(definition, rt.Compact):
            return self._param_label(definition.inner, depth + 1)
        if isinstance(definition, rt.Sequence):
            return "Vec" + self._param_label(definition.element, depth + 1)
        if isinstance(definition, rt.Array):
            return f"Array{definition.length}" + self._param_label(definition.element, depth + 1)
        if isinstance(definition, rt.Tuple):
            if not definition.elements:
                return "Unit"
            return "Tuple" + "".join(self._param_label(e, depth + 1) for e in definition.elements)
        return pascal_case(definition.former)
