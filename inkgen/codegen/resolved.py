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

import typing as _typing

if _typing.TYPE_CHECKING:
    from ._collector import Declaration


class Expression:
    """A resolved, target independent type expression. Expressions are immutable values,
    except for :class:`DeclarationRef` which is bound to its declaration exactly once."""

    def children(self) -> _typing.Tuple["Expression", ...]:
        return ()

    def _shape(self) -> _typing.Tuple:
        return self.children()

    def __eq__(self, o: object) -> bool:
        return type(o) == type(self) and o._shape() == self._shape()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._shape()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(s) for s in self._shape())})"

    __str__ = __repr__


class Scalar(Expression):
    KINDS = ("boolean", "number", "bignumber", "string", "unit")

    def __init__(self, kind: str) -> None:
        if kind not in self.KINDS:
            raise TypeError(f"Unknown scalar kind '{kind}'.")
        self.kind: str = kind

    def _shape(self):
        return (self.kind,)

    def __repr__(self) -> str:
        return self.kind


class ByteList(Expression):
    """Raw bytes, dynamically sized unless a length is given."""

    def __init__(self, length: _typing.Optional[int] = None) -> None:
        self.length: _typing.Optional[int] = length

    def _shape(self):
        return (self.length,)


class BitList(Expression):
    pass


class ListOf(Expression):
    def __init__(self, element: Expression) -> None:
        self.element: Expression = element

    def children(self):
        return (self.element,)


class FixedList(Expression):
    def __init__(self, element: Expression, length: int) -> None:
        self.element: Expression = element
        self.length: int = length

    def children(self):
        return (self.element,)

    def _shape(self):
        return (self.element, self.length)


class Group(Expression):
    def __init__(self, elements: _typing.Sequence[Expression]) -> None:
        self.elements: _typing.Tuple[Expression, ...] = tuple(elements)

    def children(self):
        return self.elements


class Nullable(Expression):
    def __init__(self, inner: Expression) -> None:
        self.inner: Expression = inner

    def children(self):
        return (self.inner,)


class Outcome(Expression):
    """Success or failure value, ``names`` are the source case names of both branches."""

    def __init__(self, ok: Expression, err: Expression,
                 names: _typing.Tuple[str, str] = ("Ok", "Err")) -> None:
        self.ok: Expression = ok
        self.err: Expression = err
        self.names: _typing.Tuple[str, str] = tuple(names)

    def children(self):
        return (self.ok, self.err)

    def _shape(self):
        return (self.ok, self.err, self.names)


class DeclarationRef(Expression):
    """Named reference to a declaration. The resolver hands out the reference as soon as it
    enters a struct or enum type, the collector binds it once the declaration has a name.
    Every user of the reference sees the binding, also those created while the type was
    still being resolved."""

    def __init__(self, type_id: int) -> None:
        self.type_id: int = type_id
        self.declaration: _typing.Optional["Declaration"] = None

    def bind(self, declaration: "Declaration") -> None:
        if self.declaration is not None and self.declaration is not declaration:
            raise RuntimeError(f"Reference to type {self.type_id} is already bound to {self.declaration.name}")
        self.declaration = declaration

    @property
    def bound(self) -> bool:
        return self.declaration is not None

    @property
    def name(self) -> str:
        if self.declaration is None:
            raise RuntimeError(f"Reference to type {self.type_id} was never bound")
        return self.declaration.name

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, DeclarationRef):
            return False
        if self.declaration is None or o.declaration is None:
            return self is o
        return self.declaration is o.declaration

    def __hash__(self) -> int:
        # Equality follows the binding, which changes once.
        return hash("DeclarationRef")

    def __repr__(self) -> str:
        if self.declaration is None:
            return f"ref[{self.type_id}]"
        return f"ref[{self.declaration.name}]"


class ResolvedField:
    """A struct or case member with its resolved type. ``positional`` marks names that were
    made up because the source field had none."""

    def __init__(self, name: str, expr: Expression, positional: bool = False,
                 docs: _typing.Sequence[str] = ()) -> None:
        self.name: str = name
        self.expr: Expression = expr
        self.positional: bool = positional
        self.docs: _typing.Tuple[str, ...] = tuple(docs)

    def __eq__(self, o: object) -> bool:
        return isinstance(o, ResolvedField) and o.name == self.name and o.expr == self.expr

    def __hash__(self) -> int:
        return hash((self.name, self.expr))

    def __repr__(self) -> str:
        return f"{self.name}: {self.expr!r}"

    __str__ = __repr__


class ResolvedCase:
    def __init__(self, name: str, index: int, fields: _typing.Sequence[ResolvedField] = (),
                 docs: _typing.Sequence[str] = ()) -> None:
        self.name: str = name
        self.index: int = index
        self.fields: _typing.Tuple[ResolvedField, ...] = tuple(fields)
        self.docs: _typing.Tuple[str, ...] = tuple(docs)

    def __eq__(self, o: object) -> bool:
        return isinstance(o, ResolvedCase) and o.name == self.name and o.index == self.index and \
            o.fields == self.fields

    def __hash__(self) -> int:
        return hash((self.name, self.index, self.fields))

    def __repr__(self) -> str:
        return f"case[{self.name}={self.index}, {list(self.fields)!r}]"

    __str__ = __repr__


def walk(expr: Expression) -> _typing.Iterator[Expression]:
    """Depth first, pre-order iteration over an expression tree. References are yielded but
    not followed."""
    yield expr
    for child in expr.children():
        yield from walk(child)


def references(exprs: _typing.Iterable[Expression]) -> _typing.List[DeclarationRef]:
    return [e for expr in exprs for e in walk(expr) if isinstance(e, DeclarationRef)]


UNIT = Scalar("unit")
