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

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import MetadataParseError, UnresolvedTypeReferenceError
from . import types as rt
from .contract import Argument, Constructor, ContractMetadata, Event, Message, TypeRegistry


log = logging.getLogger(__name__)

SUPPORTED_VERSIONS = ("4", "5")


def _is_int(value: Any) -> bool:
    return type(value) == int


def _docs(obj: Dict[str, Any]) -> tuple:
    docs = obj.get("docs") or []
    if not isinstance(docs, list):
        return ()
    return tuple(str(d) for d in docs)


class MetadataReader:
    """Turns a decoded metadata document into :class:`ContractMetadata`. Pure, no I/O."""

    @classmethod
    def read(cls, document: Any) -> ContractMetadata:
        if not isinstance(document, dict):
            raise MetadataParseError("Metadata document must be a JSON object")

        if "V3" in document or "V2" in document or "V1" in document:
            raise MetadataParseError("Legacy versioned metadata wrapper is not supported, expected version 4 or 5")

        version = document.get("version")
        if version is None or str(version) not in SUPPORTED_VERSIONS:
            raise MetadataParseError(
                f"Unsupported metadata schema version {version!r}, expected one of {', '.join(SUPPORTED_VERSIONS)}",
                "version"
            )

        contract = document.get("contract")
        if not isinstance(contract, dict) or not isinstance(contract.get("name"), str) or not contract["name"]:
            raise MetadataParseError("Contract name not found in metadata", "contract.name")

        registry = cls._read_registry(document.get("types"))
        spec = document.get("spec")
        if not isinstance(spec, dict):
            raise MetadataParseError("Missing spec section", "spec")

        metadata = ContractMetadata(
            name=contract["name"],
            version=contract.get("version") if isinstance(contract.get("version"), str) else None,
            schema_version=str(version),
            registry=registry,
            constructors=cls._read_constructors(spec, registry),
            messages=cls._read_messages(spec, registry),
            events=cls._read_events(spec, registry),
            docs=_docs(spec),
        )
        log.debug(
            "Parsed %s: %d types, %d constructors, %d messages, %d events",
            metadata.name, len(registry), len(metadata.constructors), len(metadata.messages), len(metadata.events)
        )
        return metadata

    @classmethod
    def _read_registry(cls, entries: Any) -> TypeRegistry:
        if not isinstance(entries, list):
            raise MetadataParseError("Types section must be an array", "types")

        types: Dict[int, rt.TypeDef] = {}
        for index, entry in enumerate(entries):
            where = f"types[{index}]"
            if not isinstance(entry, dict):
                raise MetadataParseError("Type entry must be an object", where)

            type_id = entry.get("id", index)
            if not _is_int(type_id) or type_id < 0:
                raise MetadataParseError(f"Invalid type id {type_id!r}", f"{where}.id")
            if type_id in types:
                raise MetadataParseError(f"Duplicate type id {type_id}", f"{where}.id")

            body = entry.get("type", entry)
            if not isinstance(body, dict):
                raise MetadataParseError("Type entry missing type definition", f"{where}.type")
            types[type_id] = cls._read_typedef(body, f"types[{type_id}]")

        registry = TypeRegistry(types)
        registry.validate()
        return registry

    @classmethod
    def _read_typedef(cls, body: Dict[str, Any], where: str) -> rt.TypeDef:
        path = body.get("path") or []
        if not isinstance(path, list) or not all(isinstance(p, str) for p in path):
            raise MetadataParseError("Type path must be a list of strings", f"{where}.path")

        params = []
        for i, p in enumerate(body.get("params") or []):
            if not isinstance(p, dict) or not isinstance(p.get("name"), str):
                raise MetadataParseError("Generic parameter needs a name", f"{where}.params[{i}]")
            ptype = p.get("type")
            if ptype is not None and not _is_int(ptype):
                raise MetadataParseError("Generic parameter type must be a TypeId", f"{where}.params[{i}].type")
            params.append(rt.Param(p["name"], ptype))

        common = dict(path=path, params=params, docs=_docs(body))

        definition = body.get("def")
        if not isinstance(definition, dict) or len(definition) != 1:
            raise MetadataParseError("Type definition must hold exactly one former", f"{where}.def")

        former, value = next(iter(definition.items()))
        where = f"{where}.def.{former}"

        if former == "primitive":
            if value not in rt.PRIMITIVES:
                raise MetadataParseError(f"Unknown primitive {value!r}", where)
            return rt.Primitive(value, **common)
        elif former == "composite":
            value = cls._expect_object(value, where)
            return rt.Composite(cls._read_fields(value.get("fields"), where), **common)
        elif former == "variant":
            value = cls._expect_object(value, where)
            return rt.Variant(cls._read_cases(value.get("variants"), where), **common)
        elif former == "sequence":
            value = cls._expect_object(value, where)
            return rt.Sequence(cls._type_ref(value, where), **common)
        elif former == "array":
            value = cls._expect_object(value, where)
            length = value.get("len")
            if not _is_int(length) or length < 0:
                raise MetadataParseError("Array former needs a non-negative length", f"{where}.len")
            return rt.Array(cls._type_ref(value, where), length, **common)
        elif former == "tuple":
            if not isinstance(value, list) or not all(_is_int(v) for v in value):
                raise MetadataParseError("Tuple former must be a list of TypeIds", where)
            return rt.Tuple(value, **common)
        elif former == "compact":
            value = cls._expect_object(value, where)
            return rt.Compact(cls._type_ref(value, where), **common)
        elif former == "bitSequence":
            value = cls._expect_object(value, where)
            store, order = value.get("bit_store_type"), value.get("bit_order_type")
            for label, v in (("bit_store_type", store), ("bit_order_type", order)):
                if v is not None and not _is_int(v):
                    raise MetadataParseError("Bit sequence store/order must be TypeIds", f"{where}.{label}")
            return rt.BitSequence(store, order, **common)

        raise MetadataParseError(f"Unknown type former {former!r}", where)

    @staticmethod
    def _expect_object(value: Any, where: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise MetadataParseError("Former body must be an object", where)
        return value

    @staticmethod
    def _type_ref(value: Dict[str, Any], where: str) -> int:
        ref = value.get("type")
        if not _is_int(ref):
            raise MetadataParseError("Missing element TypeId", f"{where}.type")
        return ref

    @classmethod
    def _read_fields(cls, fields: Any, where: str) -> List[rt.Field]:
        if fields is None:
            return []
        if not isinstance(fields, list):
            raise MetadataParseError("Fields must be a list", f"{where}.fields")

        out = []
        for i, f in enumerate(fields):
            fwhere = f"{where}.fields[{i}]"
            if not isinstance(f, dict):
                raise MetadataParseError("Field must be an object", fwhere)
            name = f.get("name")
            if name is not None and not isinstance(name, str):
                raise MetadataParseError("Field name must be a string", f"{fwhere}.name")
            out.append(rt.Field(
                name,
                cls._type_ref(f, fwhere),
                f.get("typeName") if isinstance(f.get("typeName"), str) else None,
                _docs(f)
            ))
        return out

    @classmethod
    def _read_cases(cls, cases: Any, where: str) -> List[rt.Case]:
        if cases is None:
            return []
        if not isinstance(cases, list):
            raise MetadataParseError("Variants must be a list", f"{where}.variants")

        out = []
        for i, c in enumerate(cases):
            cwhere = f"{where}.variants[{i}]"
            if not isinstance(c, dict) or not isinstance(c.get("name"), str):
                raise MetadataParseError("Variant case needs a name", cwhere)
            index = c.get("index", i)
            if not _is_int(index):
                raise MetadataParseError("Variant discriminant must be an integer", f"{cwhere}.index")
            out.append(rt.Case(c["name"], index, cls._read_fields(c.get("fields"), cwhere), _docs(c)))
        return out

    @classmethod
    def _read_args(cls, args: Any, where: str, registry: TypeRegistry) -> List[Argument]:
        if args is None:
            return []
        if not isinstance(args, list):
            raise MetadataParseError("Arguments must be a list", f"{where}.args")

        out = []
        for i, a in enumerate(args):
            awhere = f"{where}.args[{i}]"
            if not isinstance(a, dict) or not isinstance(a.get("label"), str):
                raise MetadataParseError("Argument needs a label", awhere)
            type_id = cls._spec_type(a.get("type"), f"{awhere}.type", registry)
            if type_id is None:
                raise MetadataParseError("Argument needs a type", f"{awhere}.type")
            display = a["type"].get("displayName") if isinstance(a["type"], dict) else None
            out.append(Argument(
                label=a["label"],
                type_id=type_id,
                display_name=tuple(display or ()),
                indexed=bool(a.get("indexed", False)),
                docs=_docs(a),
            ))
        return out

    @staticmethod
    def _spec_type(value: Any, where: str, registry: TypeRegistry) -> Optional[int]:
        # Spec types are {"type": id, "displayName": [...]}, a bare id is tolerated.
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get("type")
        if not _is_int(value):
            raise MetadataParseError("Type reference must be a TypeId", where)
        if value not in registry:
            raise UnresolvedTypeReferenceError(value, where)
        return value

    @staticmethod
    def _label(obj: Any, where: str) -> str:
        if not isinstance(obj, dict) or not isinstance(obj.get("label"), str) or not obj["label"]:
            raise MetadataParseError("Entry label missing", where)
        return obj["label"]

    @staticmethod
    def _section(spec: Dict[str, Any], name: str, required: bool) -> list:
        value = spec.get(name)
        if value is None and not required:
            return []
        if not isinstance(value, list):
            raise MetadataParseError(f"{name.capitalize()} not found in metadata", f"spec.{name}")
        return value

    @classmethod
    def _read_constructors(cls, spec: Dict[str, Any], registry: TypeRegistry) -> List[Constructor]:
        out = []
        for i, c in enumerate(cls._section(spec, "constructors", True)):
            where = f"spec.constructors[{i}]"
            out.append(Constructor(
                label=cls._label(c, where),
                args=cls._read_args(c.get("args"), where, registry),
                return_type=cls._spec_type(c.get("returnType"), f"{where}.returnType", registry),
                payable=bool(c.get("payable", False)),
                default=bool(c.get("default", False)),
                selector=c.get("selector"),
                docs=_docs(c),
            ))
        return out

    @classmethod
    def _read_messages(cls, spec: Dict[str, Any], registry: TypeRegistry) -> List[Message]:
        out = []
        for i, m in enumerate(cls._section(spec, "messages", True)):
            where = f"spec.messages[{i}]"
            out.append(Message(
                label=cls._label(m, where),
                args=cls._read_args(m.get("args"), where, registry),
                return_type=cls._spec_type(m.get("returnType"), f"{where}.returnType", registry),
                mutates=bool(m.get("mutates", False)),
                payable=bool(m.get("payable", False)),
                default=bool(m.get("default", False)),
                selector=m.get("selector"),
                docs=_docs(m),
            ))
        return out

    @classmethod
    def _read_events(cls, spec: Dict[str, Any], registry: TypeRegistry) -> List[Event]:
        out = []
        for i, e in enumerate(cls._section(spec, "events", False)):
            where = f"spec.events[{i}]"
            out.append(Event(
                label=cls._label(e, where),
                args=cls._read_args(e.get("args"), where, registry),
                signature_topic=e.get("signature_topic"),
                module_path=e.get("module_path"),
                docs=_docs(e),
            ))
        return out


def parse_metadata(document: Any) -> ContractMetadata:
    """Parse an already decoded metadata document."""
    return MetadataReader.read(document)


def load_metadata(source: Union[str, Path]) -> ContractMetadata:
    """Read and parse a metadata JSON file."""
    path = Path(source)
    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise MetadataParseError(f"Invalid JSON: {e.msg} at line {e.lineno} column {e.colno}", str(path)) from e
    except OSError as e:
        raise MetadataParseError(f"Could not read metadata file: {e.strerror}", str(path)) from e
    return MetadataReader.read(document)
