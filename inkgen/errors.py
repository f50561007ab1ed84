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

from typing import Optional, Sequence


class GeneratorError(Exception):
    """Base class of every error raised while generating bindings from contract metadata.
    Any of these aborts the whole run, no output is written when one is raised.
    Print the exception directly or convert it to string for a detailed description.

    Attributes
    ----------
    msg: str
        A human readable description of what went wrong and where.
    """

    def __init__(self, msg: Optional[str] = None) -> None:
        self.msg = msg or ""
        super().__init__(self.msg)

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] {self.msg}"

    def __repr__(self) -> str:
        return str(self)


class ConfigurationError(GeneratorError):
    """An options file or option value could not be understood."""


class MetadataParseError(GeneratorError):
    """The metadata document is malformed or of an unsupported schema version.

    Attributes
    ----------
    path: str
        Location inside the document, for example ``types[3].def.array``.
    """

    def __init__(self, msg: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(f"{msg} (at {path})" if path else msg)


class UnresolvedTypeReferenceError(MetadataParseError):
    """A field, element, case or argument names a TypeId absent from the registry.

    Attributes
    ----------
    type_id: int
        The missing TypeId.
    referenced_from: str
        Path of the referencing entry.
    """

    def __init__(self, type_id: int, referenced_from: str) -> None:
        self.type_id = type_id
        self.referenced_from = referenced_from
        super().__init__(f"TypeId {type_id} is not present in the type registry", referenced_from)


class RecursionLimitExceededError(GeneratorError):
    """Resolution walked deeper than the configured ceiling, or went around a cycle
    that does not pass through a struct or enum declaration.

    Attributes
    ----------
    chain: Sequence[int]
        The TypeIds on the in-progress stack at the point of failure, outermost first.
    """

    def __init__(self, chain: Sequence[int], reason: str) -> None:
        self.chain = list(chain)
        super().__init__(f"{reason}: " + " -> ".join(str(c) for c in self.chain))


class NameCollisionError(GeneratorError):
    """Two structurally distinct declarations could not be given distinct names, or a
    declaration ordering could not be satisfied.

    Attributes
    ----------
    name: str
        The contested name.
    paths: Sequence[str]
        Source paths of the conflicting declarations.
    """

    def __init__(self, name: str, paths: Sequence[str], reason: Optional[str] = None) -> None:
        self.name = name
        self.paths = list(paths)
        super().__init__(
            (reason or f"Could not give '{name}' a unique name") + ", conflicting: " + ", ".join(self.paths)
        )


class OutputWriteError(GeneratorError):
    """The generated files could not be written. Files already in place are left untouched.

    Attributes
    ----------
    path: str
        The output directory.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not write generated files to {path}: {reason}")


__all__ = [
    "GeneratorError",
    "ConfigurationError",
    "MetadataParseError",
    "UnresolvedTypeReferenceError",
    "RecursionLimitExceededError",
    "NameCollisionError",
    "OutputWriteError",
]
