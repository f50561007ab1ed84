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

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from ..errors import UnresolvedTypeReferenceError
from .types import TypeDef


class TypeRegistry(Mapping[int, TypeDef]):
    """Flat, TypeId-addressed arena of type definitions. Lookups of unknown ids raise
    :class:`UnresolvedTypeReferenceError` instead of ``KeyError``."""

    def __init__(self, types: Dict[int, TypeDef]) -> None:
        self._types: Dict[int, TypeDef] = dict(types)

    def __getitem__(self, type_id: int) -> TypeDef:
        try:
            return self._types[type_id]
        except KeyError:
            raise UnresolvedTypeReferenceError(type_id, "registry lookup") from None

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._types))

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"TypeRegistry({len(self)} types)"

    def validate(self) -> None:
        """Check every reference between definitions points at a registered id."""
        for type_id in self:
            for label, ref in self._types[type_id].references():
                if ref not in self._types:
                    raise UnresolvedTypeReferenceError(ref, f"types[{type_id}].{label}")


@dataclass
class Argument:
    label: str
    type_id: int
    display_name: Tuple[str, ...] = ()
    indexed: bool = False
    docs: Tuple[str, ...] = ()


@dataclass
class Constructor:
    label: str
    args: List[Argument] = field(default_factory=list)
    return_type: Optional[int] = None
    payable: bool = False
    default: bool = False
    selector: Optional[str] = None
    docs: Tuple[str, ...] = ()


@dataclass
class Message:
    label: str
    args: List[Argument] = field(default_factory=list)
    return_type: Optional[int] = None
    mutates: bool = False
    payable: bool = False
    default: bool = False
    selector: Optional[str] = None
    docs: Tuple[str, ...] = ()


@dataclass
class Event:
    label: str
    args: List[Argument] = field(default_factory=list)
    signature_topic: Optional[str] = None
    module_path: Optional[str] = None
    docs: Tuple[str, ...] = ()


@dataclass
class ContractMetadata:
    """Everything the generator consumes from one metadata document."""
    name: str
    registry: TypeRegistry
    version: Optional[str] = None
    schema_version: str = "4"
    constructors: List[Constructor] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    docs: Tuple[str, ...] = ()

    @property
    def queries(self) -> List[Message]:
        return [m for m in self.messages if not m.mutates]

    @property
    def transactions(self) -> List[Message]:
        return [m for m in self.messages if m.mutates]

    def root_type_ids(self) -> List[int]:
        """TypeIds reachable from the contract surface, in declaration order."""
        ids: List[int] = []
        for ctor in self.constructors:
            ids += [a.type_id for a in ctor.args]
        for msg in self.messages:
            ids += [a.type_id for a in msg.args]
            if msg.return_type is not None:
                ids.append(msg.return_type)
        for ev in self.events:
            ids += [a.type_id for a in ev.args]
        seen = set()
        return [i for i in ids if not (i in seen or seen.add(i))]
