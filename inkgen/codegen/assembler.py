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

import os
import logging
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

from ..errors import NameCollisionError, OutputWriteError
from ._collector import Declaration
from ._graph import dependency_order
from .surface import ContractSurface
from .typescript import SurfaceNames, TypeScriptEmitter


log = logging.getLogger(__name__)


class ModuleAssembler:
    """Orders declarations and glues the emitter's sections into one module.

    Parameters
    ----------
    emitter: TypeScriptEmitter
        Renders every section.
    allow_forward_references: bool
        Whether the target may name a declaration before it is declared. When it may not,
        declarations referencing each other (other than a type referencing itself) cannot be
        ordered and raise :class:`NameCollisionError`.
    """

    def __init__(self, emitter: TypeScriptEmitter, allow_forward_references: bool = True) -> None:
        self.emitter = emitter
        self.allow_forward_references = allow_forward_references

    def order(self, declarations: Sequence[Declaration]) -> List[Declaration]:
        """Dependencies before dependents, mutually recursive declarations in first-seen order."""
        index = {id(d): i for i, d in enumerate(declarations)}
        graph = [
            [index[id(dep)] for dep in d.dependencies() if id(dep) in index]
            for d in declarations
        ]

        ordered: List[Declaration] = []
        for component in dependency_order(graph):
            if len(component) > 1 and not self.allow_forward_references:
                members = [declarations[i] for i in component]
                raise NameCollisionError(
                    members[0].name, [m.path_text for m in members],
                    "Declarations reference each other and cannot be ordered without forward references"
                )
            ordered += [declarations[i] for i in component]
        return ordered

    def assemble(self, surface: ContractSurface, names: SurfaceNames,
                 declarations: Sequence[Declaration]) -> str:
        sections = self.emitter.sections(surface, names, self.order(declarations))
        return "\n".join(sections)


def _discard(staged: List[Tuple[str, Path]]) -> None:
    for tmp, _ in staged:
        with suppress(OSError):
            os.unlink(tmp)


def write_files(files: Dict[str, str], output_dir: Union[str, Path]) -> List[Path]:
    """Write all files or none. Every file is first written next to its target and only moved
    into place once all of them have been written.

    Raises
    ------
    OutputWriteError
        The directory could not be created or a file could not be written.
    """
    output_dir = Path(output_dir)

    staged: List[Tuple[str, Path]] = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for name, text in files.items():
            fd, tmp = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=output_dir)
            staged.append((tmp, output_dir / name))
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
    except OSError as e:
        _discard(staged)
        raise OutputWriteError(str(output_dir), e.strerror or str(e)) from e
    except BaseException:
        _discard(staged)
        raise

    for tmp, target in staged:
        try:
            os.replace(tmp, target)
        except OSError as e:
            _discard(staged)
            raise OutputWriteError(str(output_dir), f"{target.name}: {e.strerror or e}") from e
        log.debug("Wrote %s", target)
    return [target for _, target in staged]
