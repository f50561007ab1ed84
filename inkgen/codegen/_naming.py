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

import re
import json
from typing import Iterable, List


RESERVED = frozenset((
    "abstract", "any", "as", "async", "await", "boolean", "break", "case", "catch", "class",
    "const", "constructor", "continue", "debugger", "declare", "default", "delete", "do",
    "else", "enum", "export", "extends", "false", "finally", "for", "from", "function", "get",
    "if", "implements", "import", "in", "infer", "instanceof", "interface", "is", "keyof",
    "let", "module", "namespace", "never", "new", "null", "number", "object", "package",
    "private", "protected", "public", "readonly", "require", "return", "set", "static",
    "string", "super", "switch", "symbol", "this", "throw", "true", "try", "type", "typeof",
    "undefined", "unique", "unknown", "var", "void", "while", "with", "yield",
))

# Global names a declaration must not shadow in the generated module.
BUILTIN_NAMES = frozenset((
    "Array", "BigInt", "Boolean", "Date", "Error", "Map", "Number", "Object", "Promise",
    "Record", "Set", "String", "Symbol", "Uint8Array", "Partial", "Readonly",
))

_identifier = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_word_split = re.compile(r"[^A-Za-z0-9]+")


def is_identifier(name: str) -> bool:
    return bool(_identifier.match(name)) and name not in RESERVED


def pascal_case(name: str) -> str:
    """``token_balance`` -> ``TokenBalance``, ``ERC20`` stays ``ERC20``."""
    out = "".join(w[:1].upper() + w[1:] for w in _word_split.split(name) if w)
    if not out:
        return "_"
    if out[0].isdigit():
        out = "_" + out
    return out


def join_path(segments: Iterable[str]) -> str:
    """PascalCase join of path segments with consecutive duplicates removed."""
    parts: List[str] = []
    for s in segments:
        p = pascal_case(s)
        if not parts or parts[-1] != p:
            parts.append(p)
    return "".join(parts)


def type_name(name: str) -> str:
    out = pascal_case(name)
    if out in RESERVED or out in BUILTIN_NAMES:
        out += "_"
    return out


def sanitize_identifier(name: str) -> str:
    """Make a valid, non reserved binding name out of an argument label."""
    out = re.sub(r"[^A-Za-z0-9_$]", "_", name)
    if not out:
        return "_"
    if out[0].isdigit():
        out = "_" + out
    if out in RESERVED:
        out += "_"
    return out


def property_name(name: str) -> str:
    """Property keys may be reserved words but must be quoted when not identifier shaped."""
    if _identifier.match(name):
        return name
    return json.dumps(name)


def string_literal(value: str) -> str:
    return json.dumps(value)
