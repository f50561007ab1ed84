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

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import GeneratorOptions
from ..errors import NameCollisionError
from ..registry import ContractMetadata, parse_metadata
from ._collector import Declaration, DeclarationCollector
from ._resolver import TypeResolver
from .assembler import ModuleAssembler, write_files
from .hooks import hooks_filename, render_hooks
from .surface import ContractSurface, resolve_surface
from .typescript import SurfaceNames, TypeScriptEmitter


log = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation run, nothing is on disk until :func:`write` is called.

    Attributes
    ----------
    module_name: str
        File name of the main module without extension.
    files: Dict[str, str]
        Rendered text by file name, the main module first.
    declarations: List[Declaration]
        Emitted declarations in module order.
    surface: ContractSurface
        The resolved constructors, messages and events.
    """
    module_name: str
    files: Dict[str, str]
    declarations: List[Declaration]
    surface: ContractSurface
    names: SurfaceNames
    options: GeneratorOptions = field(default_factory=GeneratorOptions)

    @property
    def module(self) -> str:
        return self.files[f"{self.module_name}.ts"]


def _reserve_surface(collector: DeclarationCollector, metadata: ContractMetadata, names: SurfaceNames) -> None:
    taken = names.all()
    for name, count in Counter(taken).items():
        if count > 1:
            labels = [key for key, n in zip(names.event_keys, names.event) if n == name] or [metadata.name]
            raise NameCollisionError(name, labels, f"Generated surface declarations share the name '{name}'")
    for name in taken:
        collector.reserve(name)


def generate(document: Union[ContractMetadata, Dict[str, Any]],
             options: Optional[GeneratorOptions] = None) -> GenerationResult:
    """Generate the TypeScript bindings of a contract. Pure, nothing is written.

    Parameters
    ----------
    document: ContractMetadata or dict
        Parsed metadata, or the decoded JSON document.
    options: GeneratorOptions, optional
        Defaults apply when omitted.

    Raises
    ------
    GeneratorError
        Any failure, see :mod:`inkgen.errors`. No partial result is returned.
    """
    options = options or GeneratorOptions()
    metadata = document if isinstance(document, ContractMetadata) else parse_metadata(document)

    names = SurfaceNames(metadata.name, metadata.events)
    collector = DeclarationCollector(options.collision_limit)
    _reserve_surface(collector, metadata, names)

    resolver = TypeResolver(metadata.registry, collector, options.conventions, options.max_depth)
    surface = resolve_surface(metadata, resolver)

    assembler = ModuleAssembler(TypeScriptEmitter(legacy=options.legacy))
    declarations = assembler.order(collector.declarations)

    module_name = options.module_name or metadata.name
    files = {f"{module_name}.ts": assembler.assemble(surface, names, declarations)}
    if options.hooks:
        files[hooks_filename(names)] = render_hooks(surface, names, module_name)

    log.info(
        "Generated %s: %d declarations from %d types, %d queries, %d transactions, %d events",
        module_name, len(declarations), len(resolver), len(surface.queries),
        len(surface.transactions), len(surface.events)
    )
    return GenerationResult(module_name, files, declarations, surface, names, options)


def write(result: GenerationResult, output_dir: Optional[Union[str, Path]] = None) -> List[Path]:
    """Write every generated file atomically, into ``output_dir`` or the configured directory."""
    return write_files(result.files, output_dir if output_dir is not None else result.options.output_dir)


__all__ = [
    "generate", "write", "GenerationResult",
    "TypeResolver", "DeclarationCollector", "Declaration",
    "TypeScriptEmitter", "ModuleAssembler", "SurfaceNames", "ContractSurface",
]
