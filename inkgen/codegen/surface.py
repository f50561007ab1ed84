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
from typing import List, Optional, Tuple

from ..registry.contract import Argument, ContractMetadata
from ._resolver import TypeResolver
from .resolved import Expression, UNIT


@dataclass
class ResolvedArgument:
    label: str
    expr: Expression
    indexed: bool = False
    docs: Tuple[str, ...] = ()


@dataclass
class ResolvedCallable:
    """A constructor or message with resolved argument and return types."""
    label: str
    args: List[ResolvedArgument] = field(default_factory=list)
    returns: Expression = UNIT
    mutates: bool = False
    payable: bool = False
    selector: Optional[str] = None
    docs: Tuple[str, ...] = ()


@dataclass
class ResolvedEvent:
    label: str
    fields: List[ResolvedArgument] = field(default_factory=list)
    signature_topic: Optional[str] = None
    docs: Tuple[str, ...] = ()


@dataclass
class ContractSurface:
    name: str
    version: Optional[str]
    constructors: List[ResolvedCallable] = field(default_factory=list)
    queries: List[ResolvedCallable] = field(default_factory=list)
    transactions: List[ResolvedCallable] = field(default_factory=list)
    events: List[ResolvedEvent] = field(default_factory=list)
    docs: Tuple[str, ...] = ()


def _args(resolver: TypeResolver, args: List[Argument]) -> List[ResolvedArgument]:
    return [ResolvedArgument(a.label, resolver.resolve(a.type_id), a.indexed, a.docs) for a in args]


def resolve_surface(metadata: ContractMetadata, resolver: TypeResolver) -> ContractSurface:
    """Resolve every argument, return and event field type, in declaration order: constructors
    first, then messages, then events. This order decides which declaration is seen first."""
    surface = ContractSurface(name=metadata.name, version=metadata.version, docs=metadata.docs)

    for ctor in metadata.constructors:
        surface.constructors.append(ResolvedCallable(
            label=ctor.label,
            args=_args(resolver, ctor.args),
            returns=resolver.resolve(ctor.return_type) if ctor.return_type is not None else UNIT,
            payable=ctor.payable,
            selector=ctor.selector,
            docs=ctor.docs,
        ))

    for msg in metadata.messages:
        resolved = ResolvedCallable(
            label=msg.label,
            args=_args(resolver, msg.args),
            returns=resolver.resolve(msg.return_type) if msg.return_type is not None else UNIT,
            mutates=msg.mutates,
            payable=msg.payable,
            selector=msg.selector,
            docs=msg.docs,
        )
        (surface.transactions if msg.mutates else surface.queries).append(resolved)

    for ev in metadata.events:
        surface.events.append(ResolvedEvent(
            label=ev.label,
            fields=_args(resolver, ev.args),
            signature_topic=ev.signature_topic,
            docs=ev.docs,
        ))

    return surface
