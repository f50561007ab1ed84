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

from . import types
from .types import (
    TypeDef, Primitive, Composite, Variant, Sequence, Array, Tuple, Compact, BitSequence,
    Field, Case, Param, FORMERS, PRIMITIVES
)
from .contract import TypeRegistry, Argument, Constructor, Message, Event, ContractMetadata
from ._parser import MetadataReader, parse_metadata, load_metadata


__all__ = [
    "types",
    "TypeDef", "Primitive", "Composite", "Variant", "Sequence", "Array", "Tuple", "Compact", "BitSequence",
    "Field", "Case", "Param", "FORMERS", "PRIMITIVES",
    "TypeRegistry", "Argument", "Constructor", "Message", "Event", "ContractMetadata",
    "MetadataReader", "parse_metadata", "load_metadata",
]
