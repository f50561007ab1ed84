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

from .errors import (
    GeneratorError, ConfigurationError, MetadataParseError, UnresolvedTypeReferenceError,
    RecursionLimitExceededError, NameCollisionError, OutputWriteError
)
from .config import Conventions, GeneratorOptions, load_options
from .registry import ContractMetadata, load_metadata, parse_metadata
from .codegen import GenerationResult, generate, write


__version__ = "0.1.0"

__all__ = [
    "GeneratorError", "ConfigurationError", "MetadataParseError", "UnresolvedTypeReferenceError",
    "RecursionLimitExceededError", "NameCollisionError", "OutputWriteError",
    "Conventions", "GeneratorOptions", "load_options",
    "ContractMetadata", "load_metadata", "parse_metadata",
    "GenerationResult", "generate", "write",
]
