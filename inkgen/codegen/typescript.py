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

from collections import Counter
from textwrap import indent
from typing import List, Optional, Sequence

from ._collector import Declaration
from ._naming import join_path, property_name, sanitize_identifier, string_literal, type_name
from .resolved import (
    Expression, Scalar, ByteList, BitList, ListOf, FixedList, Group, Nullable, Outcome,
    DeclarationRef, ResolvedField, UNIT
)
from .surface import ContractSurface, ResolvedArgument, ResolvedCallable, ResolvedEvent


HANDLE_TYPES = ("TransactionReceipt", "TransactionHandle")


class SurfaceNames:
    """Names of the fixed declarations of one generated module.

    Events are named after their label. Labels that several events share (events declared
    in different modules) are qualified with the module path instead, both in the interface
    name and in the key of the events map. ``event`` and ``event_keys`` run parallel to the
    events given.
    """

    def __init__(self, contract_name: str, events: Sequence = ()) -> None:
        base = type_name(contract_name)
        self.contract = base
        self.constructor_args = f"{base}ConstructorArgs"
        self.queries = f"{base}Queries"
        self.transactions = f"{base}Transactions"
        self.events = f"{base}Events"

        shared = Counter(e.label for e in events)
        self.event: List[str] = []
        self.event_keys: List[str] = []
        for e in events:
            if shared[e.label] > 1 and e.module_path:
                self.event_keys.append(f"{e.module_path}::{e.label}")
                self.event.append(type_name(join_path(e.module_path.split("::") + [e.label])) + "Event")
            else:
                self.event_keys.append(e.label)
                self.event.append(f"{type_name(e.label)}Event")

    def all(self) -> List[str]:
        return list(HANDLE_TYPES) + [
            self.contract, self.constructor_args, self.queries, self.transactions, self.events
        ] + self.event


class _State:
    def __init__(self) -> None:
        self.output = ""
        self.depth = 0

    def enter(self, opener: str) -> None:
        self.add_output(opener + " {\n")
        self.depth += 1

    def exit(self, closer: str = "}") -> None:
        self.depth -= 1
        self.add_output(closer + "\n")

    def add_output(self, data: str) -> None:
        self.output += indent(data, "  " * self.depth)

    def blank(self) -> None:
        self.output += "\n"


class TypeScriptEmitter:
    """Renders resolved expressions, declarations and the contract surface as TypeScript.
    Performs no resolution itself.

    Parameters
    ----------
    legacy: bool
        Render enums as loose interfaces with one optional property per case instead of
        discriminated unions.
    """

    scalar_types = {
        "boolean": "boolean",
        "number": "number",
        "bignumber": "number | bigint | string",
        "string": "string",
    }

    def __init__(self, legacy: bool = False) -> None:
        self.legacy = legacy

    # Expressions

    def expression(self, expr: Expression, position: str = "value") -> str:
        """Inline TypeScript for an expression. In ``return`` position the unit type is ``void``."""
        if isinstance(expr, Scalar):
            if expr.kind == "unit":
                return "void" if position == "return" else "null"
            return self.scalar_types[expr.kind]
        elif isinstance(expr, ByteList):
            return "Uint8Array | string"
        elif isinstance(expr, BitList):
            return "boolean[]"
        elif isinstance(expr, ListOf):
            return self._element(expr.element) + "[]"
        elif isinstance(expr, FixedList):
            return self._element(expr.element) + f"[] /* length {expr.length} */"
        elif isinstance(expr, Group):
            return "[" + ", ".join(self.expression(e) for e in expr.elements) + "]"
        elif isinstance(expr, Nullable):
            if expr.inner == UNIT:
                # Presence without a value.
                return "true | null"
            return self.expression(expr.inner) + " | null"
        elif isinstance(expr, Outcome):
            ok, err = expr.names
            return f"{{ {property_name(ok)}: {self.expression(expr.ok)} }} | " \
                f"{{ {property_name(err)}: {self.expression(expr.err)} }}"
        elif isinstance(expr, DeclarationRef):
            return expr.name
        raise TypeError(f"Cannot render {expr!r}")

    def _element(self, expr: Expression) -> str:
        text = self.expression(expr)
        if self._is_union(expr) or isinstance(expr, FixedList):
            return f"({text})"
        return text

    @staticmethod
    def _is_union(expr: Expression) -> bool:
        if isinstance(expr, Scalar):
            return expr.kind == "bignumber"
        return isinstance(expr, (ByteList, Nullable, Outcome))

    # Documentation

    @staticmethod
    def jsdoc(docs: Sequence[str], tags: Sequence[str] = ()) -> str:
        lines = [d.strip().replace("*/", "*\\/") for d in docs]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        lines += list(tags)
        if not lines:
            return ""
        if len(lines) == 1:
            return f"/** {lines[0]} */\n"
        return "/**\n" + "".join(f" * {line}".rstrip() + "\n" for line in lines) + " */\n"

    # Declarations

    def _members(self, state: _State, fields: Sequence[ResolvedField]) -> None:
        for f in fields:
            state.add_output(self.jsdoc(f.docs))
            state.add_output(f"{property_name(f.name)}: {self.expression(f.expr)};\n")

    def _inline_object(self, fields: Sequence[ResolvedField]) -> str:
        return "{ " + "; ".join(f"{property_name(f.name)}: {self.expression(f.expr)}" for f in fields) + " }"

    def declaration(self, decl: Declaration) -> str:
        state = _State()
        state.add_output(self.jsdoc(decl.docs))

        if decl.kind == "struct":
            state.enter(f"export interface {decl.name}")
            self._members(state, decl.fields)
            state.exit()
        elif self.legacy:
            state.enter(f"export interface {decl.name}")
            for case in decl.cases:
                if not case.fields:
                    value = "null"
                elif len(case.fields) == 1 and case.fields[0].positional:
                    value = self.expression(case.fields[0].expr) + " | null"
                else:
                    value = self._inline_object(case.fields) + " | null"
                state.add_output(self.jsdoc(case.docs))
                state.add_output(f"{property_name(case.name)}?: {value};\n")
            state.exit()
        else:
            if not decl.cases:
                state.add_output(f"export type {decl.name} = never;\n")
            else:
                state.add_output(f"export type {decl.name} =\n")
                state.depth += 1
                for i, case in enumerate(decl.cases):
                    parts = [f"type: {string_literal(case.name)}"] + [
                        f"{property_name(f.name)}: {self.expression(f.expr)}" for f in case.fields
                    ]
                    state.add_output(self.jsdoc(case.docs))
                    end = ";" if i == len(decl.cases) - 1 else ""
                    state.add_output("| { " + "; ".join(parts) + " }" + end + "\n")
                state.depth -= 1
            state.blank()
            state.enter(f"export const {decl.name}Discriminant =")
            for case in decl.cases:
                state.add_output(f"{property_name(case.name)}: {case.index},\n")
            state.exit("} as const;")

        return state.output

    # Contract surface

    def _params(self, args: Sequence[ResolvedArgument]) -> str:
        seen = {}
        out = []
        for a in args:
            name = sanitize_identifier(a.label)
            if name in seen:
                seen[name] += 1
                name = f"{name}{seen[name]}"
            else:
                seen[name] = 1
            out.append(f"{name}: {self.expression(a.expr)}")
        return ", ".join(out)

    @staticmethod
    def _tags(entry: ResolvedCallable) -> List[str]:
        tags = []
        if entry.payable:
            tags.append("@payable")
        if entry.selector:
            tags.append(f"@selector {entry.selector}")
        return tags

    def constructor_args(self, surface: ContractSurface, names: SurfaceNames) -> str:
        state = _State()
        state.add_output(self.jsdoc(["Argument tuples of every constructor, by constructor label."]))
        state.enter(f"export interface {names.constructor_args}")
        for ctor in surface.constructors:
            state.add_output(self.jsdoc(ctor.docs, self._tags(ctor)))
            state.add_output(f"{property_name(ctor.label)}: [{self._params(ctor.args)}];\n")
        state.exit()
        return state.output

    def queries(self, surface: ContractSurface, names: SurfaceNames) -> str:
        state = _State()
        state.add_output(self.jsdoc(["Read-only messages, resolving to their decoded return value."]))
        state.enter(f"export interface {names.queries}")
        for msg in surface.queries:
            state.add_output(self.jsdoc(msg.docs, self._tags(msg)))
            returns = self.expression(msg.returns, "return")
            state.add_output(f"{property_name(msg.label)}({self._params(msg.args)}): Promise<{returns}>;\n")
        state.exit()
        return state.output

    def transactions(self, surface: ContractSurface, names: SurfaceNames) -> str:
        state = _State()
        state.add_output(self.jsdoc(["State-mutating messages, resolving to a handle of the submitted transaction."]))
        state.enter(f"export interface {names.transactions}")
        for msg in surface.transactions:
            state.add_output(self.jsdoc(msg.docs, self._tags(msg)))
            state.add_output(f"{property_name(msg.label)}({self._params(msg.args)}): Promise<TransactionHandle>;\n")
        state.exit()
        return state.output

    def event(self, event: ResolvedEvent, name: str) -> str:
        state = _State()
        tags = [f"@signature {event.signature_topic}"] if event.signature_topic else []
        state.add_output(self.jsdoc(event.docs, tags))
        state.enter(f"export interface {name}")
        for f in event.fields:
            state.add_output(self.jsdoc(f.docs, ["@indexed"] if f.indexed else []))
            state.add_output(f"{property_name(f.label)}: {self.expression(f.expr)};\n")
        state.exit()
        return state.output

    def events(self, surface: ContractSurface, names: SurfaceNames) -> str:
        state = _State()
        state.enter(f"export interface {names.events}")
        for key, name in zip(names.event_keys, names.event):
            state.add_output(f"{property_name(key)}: {name};\n")
        state.exit()
        return state.output

    def contract(self, surface: ContractSurface, names: SurfaceNames) -> str:
        state = _State()
        state.add_output(self.jsdoc(surface.docs))
        state.enter(f"export interface {names.contract}")
        state.add_output("readonly address: string;\n")
        state.add_output(f"readonly query: {names.queries};\n")
        state.add_output(f"readonly tx: {names.transactions};\n")
        state.add_output(f"readonly events: {names.events};\n")
        state.exit()
        return state.output

    # Boilerplate

    @staticmethod
    def header(surface: ContractSurface, tool: str = "inkgen") -> str:
        version = f" {surface.version}" if surface.version else ""
        return (
            "/* eslint-disable */\n"
            f"// Generated by {tool} from the metadata of contract {surface.name}{version}.\n"
            f"// Do not edit by hand, regenerate with `{tool} typegen` instead.\n"
        )

    @staticmethod
    def handle_types() -> str:
        return (
            "/** Receipt of a transaction once it is included in a block. */\n"
            "export interface TransactionReceipt {\n"
            "  txHash: string;\n"
            "  blockHash: string;\n"
            "  blockNumber: number;\n"
            "  success: boolean;\n"
            "  error?: string;\n"
            "}\n"
            "\n"
            "/** Handle of a submitted state-mutating call, implemented by the execution layer. */\n"
            "export interface TransactionHandle {\n"
            "  /** Hash identifying the submitted transaction. */\n"
            "  hash(): string;\n"
            "  /** Resolves once the transaction is included and finalized. */\n"
            "  wait(timeout?: number): Promise<TransactionReceipt>;\n"
            "  /** Resolves to whether the call succeeded. */\n"
            "  success(): Promise<boolean>;\n"
            "}\n"
        )

    def sections(self, surface: ContractSurface, names: SurfaceNames,
                 declarations: Sequence[Declaration], tool: Optional[str] = None) -> List[str]:
        """Every part of the module in output order, declarations in the order given."""
        parts = [self.header(surface, tool or "inkgen"), self.handle_types()]
        parts += [self.declaration(d) for d in declarations]
        parts += [
            self.constructor_args(surface, names),
            self.queries(surface, names),
            self.transactions(surface, names),
        ]
        parts += [self.event(e, name) for e, name in zip(surface.events, names.event)]
        parts += [self.events(surface, names), self.contract(surface, names)]
        return parts
