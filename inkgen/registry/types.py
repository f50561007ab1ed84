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


PRIMITIVES = (
    "bool", "char", "str",
    "u8", "u16", "u32", "u64", "u128", "u256",
    "i8", "i16", "i32", "i64", "i128", "i256",
)

# Integer primitives that fit a javascript number without loss
SMALL_INTEGERS = ("u8", "u16", "u32", "i8", "i16", "i32")
LARGE_INTEGERS = ("u64", "u128", "u256", "i64", "i128", "i256")


def _seq_repr(items) -> str:
    return "[" + ", ".join(repr(i) for i in items) + "]"


class Field:
    """A named or positional member of a composite or of a variant case."""

    def __init__(self, name: _typing.Optional[str], type_id: int,
                 type_name: _typing.Optional[str] = None, docs: _typing.Sequence[str] = ()) -> None:
        self.name: _typing.Optional[str] = name
        self.type_id: int = type_id
        self.type_name: _typing.Optional[str] = type_name
        self.docs: _typing.Tuple[str, ...] = tuple(docs)

    def __repr__(self) -> str:
        if self.name is None:
            return f"field[{self.type_id}]"
        return f"field[{self.name}: {self.type_id}]"

    def __eq__(self, o: object) -> bool:
        return isinstance(o, Field) and o.name == self.name and o.type_id == self.type_id

    def __hash__(self) -> int:
        return hash(self.name) ^ (520945389127 * self.type_id)

    __str__ = __repr__


class Case:
    """One case of a variant: a name, its stable discriminant and zero or more fields."""

    def __init__(self, name: str, index: int, fields: _typing.Sequence[Field] = (),
                 docs: _typing.Sequence[str] = ()) -> None:
        self.name: str = name
        self.index: int = index
        self.fields: _typing.Tuple[Field, ...] = tuple(fields)
        self.docs: _typing.Tuple[str, ...] = tuple(docs)

    def __repr__(self) -> str:
        return f"case[{self.name}={self.index}, {_seq_repr(self.fields)}]"

    def __eq__(self, o: object) -> bool:
        return isinstance(o, Case) and o.name == self.name and o.index == self.index and o.fields == self.fields

    def __hash__(self) -> int:
        return hash((self.name, self.index, self.fields))

    __str__ = __repr__


class Param:
    """Generic parameter binding, the bound type may be absent for phantom parameters."""

    def __init__(self, name: str, type_id: _typing.Optional[int] = None) -> None:
        self.name: str = name
        self.type_id: _typing.Optional[int] = type_id

    def __repr__(self) -> str:
        return f"param[{self.name}={self.type_id}]"

    def __eq__(self, o: object) -> bool:
        return isinstance(o, Param) and o.name == self.name and o.type_id == self.type_id

    def __hash__(self) -> int:
        return hash((self.name, self.type_id))

    __str__ = __repr__


class TypeDef:
    """Base of the eight type formers. Every former carries the namespace path used for
    default naming, its generic parameter bindings and the docs of the source type."""

    former: _typing.ClassVar[str] = ""

    def __init__(self, path: _typing.Sequence[str] = (), params: _typing.Sequence[Param] = (),
                 docs: _typing.Sequence[str] = ()) -> None:
        self.path: _typing.Tuple[str, ...] = tuple(path)
        self.params: _typing.Tuple[Param, ...] = tuple(params)
        self.docs: _typing.Tuple[str, ...] = tuple(docs)

    @property
    def name(self) -> _typing.Optional[str]:
        return self.path[-1] if self.path else None

    @property
    def qualified_name(self) -> str:
        return "::".join(self.path)

    def references(self) -> _typing.List[_typing.Tuple[str, int]]:
        """All TypeIds this definition points at, paired with a label locating the reference."""
        return [(f"params.{p.name}", p.type_id) for p in self.params if p.type_id is not None]

    def _shape(self) -> _typing.Tuple:
        raise NotImplementedError()

    def __eq__(self, o: object) -> bool:
        return type(o) == type(self) and o.path == self.path and o.params == self.params and \
            o._shape() == self._shape()

    def __hash__(self) -> int:
        return hash((self.former, self.path, self._shape()))

    def __repr__(self) -> str:
        prefix = f"{self.qualified_name} " if self.path else ""
        return f"{prefix}{self.former}[{', '.join(repr(s) for s in self._shape())}]"

    __str__ = __repr__


class Primitive(TypeDef):
    former = "primitive"

    def __init__(self, kind: str, **kwargs) -> None:
        if kind not in PRIMITIVES:
            raise TypeError(f"Unknown primitive '{kind}'.")
        super().__init__(**kwargs)
        self.kind: str = kind

    def _shape(self):
        return (self.kind,)

    def __repr__(self) -> str:
        return self.kind


class Composite(TypeDef):
    former = "composite"

    def __init__(self, fields: _typing.Sequence[Field] = (), **kwargs) -> None:
        super().__init__(**kwargs)
        self.fields: _typing.Tuple[Field, ...] = tuple(fields)

    def references(self):
        return [(f"fields[{i}]", f.type_id) for i, f in enumerate(self.fields)] + super().references()

    def _shape(self):
        return self.fields


class Variant(TypeDef):
    former = "variant"

    def __init__(self, cases: _typing.Sequence[Case] = (), **kwargs) -> None:
        super().__init__(**kwargs)
        self.cases: _typing.Tuple[Case, ...] = tuple(cases)

    def case(self, name: str) -> _typing.Optional[Case]:
        for c in self.cases:
            if c.name == name:
                return c
        return None

    def references(self):
        return [
            (f"variants[{c.name}].fields[{i}]", f.type_id)
            for c in self.cases for i, f in enumerate(c.fields)
        ] + super().references()

    def _shape(self):
        return self.cases


class Sequence(TypeDef):
    former = "sequence"

    def __init__(self, element: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.element: int = element

    def references(self):
        return [("type", self.element)] + super().references()

    def _shape(self):
        return (self.element,)


class Array(TypeDef):
    former = "array"

    def __init__(self, element: int, length: int, **kwargs) -> None:
        if type(length) != int or length < 0:
            raise TypeError("An array takes a non-negative integer length.")
        super().__init__(**kwargs)
        self.element: int = element
        self.length: int = length

    def references(self):
        return [("type", self.element)] + super().references()

    def _shape(self):
        return (self.element, self.length)


class Tuple(TypeDef):
    former = "tuple"

    def __init__(self, elements: _typing.Sequence[int] = (), **kwargs) -> None:
        super().__init__(**kwargs)
        self.elements: _typing.Tuple[int, ...] = tuple(elements)

    def references(self):
        return [(f"[{i}]", e) for i, e in enumerate(self.elements)] + super().references()

    def _shape(self):
        return self.elements


class Compact(TypeDef):
    """Encoding hint only, resolves exactly like its inner type."""
    former = "compact"

    def __init__(self, inner: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.inner: int = inner

    def references(self):
        return [("type", self.inner)] + super().references()

    def _shape(self):
        return (self.inner,)


class BitSequence(TypeDef):
    former = "bitSequence"

    def __init__(self, store: _typing.Optional[int] = None, order: _typing.Optional[int] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        # Recorded for completeness, the generated shape never depends on them.
        self.store: _typing.Optional[int] = store
        self.order: _typing.Optional[int] = order

    def _shape(self):
        return (self.store, self.order)


FORMERS: _typing.Dict[str, _typing.Type[TypeDef]] = {
    cls.former: cls
    for cls in (Primitive, Composite, Variant, Sequence, Array, Tuple, Compact, BitSequence)
}
