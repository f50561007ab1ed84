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
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .errors import ConfigurationError


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conventions:
    """Name based heuristics the resolver applies to otherwise ordinary composites and
    variants. None of these patterns are guaranteed by the registry schema, a registry
    that happens to use the same case names for something else can be handled by
    switching the matching detection off.

    Attributes
    ----------
    option_cases: Tuple[str, str]
        Names of the absent and the present case of an optional value.
    result_cases: Tuple[str, str]
        Names of the success and the failure case of a fallible value.
    require_path: bool
        Additionally require the last path segment to read ``Option`` or ``Result``.
    address_names: Tuple[str, ...]
        Last path segments of single byte-array wrappers that render as a string.
    hash_names: Tuple[str, ...]
        Last path segments of single byte-array wrappers that render as bytes.
    detect_option: bool
        Render matching two case variants as a nullable expression.
    detect_result: bool
        Render matching two case variants as an inline outcome expression.
    """
    option_cases: Tuple[str, str] = ("None", "Some")
    result_cases: Tuple[str, str] = ("Ok", "Err")
    require_path: bool = False
    address_names: Tuple[str, ...] = ("AccountId", "AccountId32", "H160", "Address")
    hash_names: Tuple[str, ...] = ("Hash", "H256")
    detect_option: bool = True
    detect_result: bool = True

    def __post_init__(self):
        for name in ("option_cases", "result_cases"):
            value = getattr(self, name)
            if len(value) != 2 or len(set(value)) != 2:
                raise ConfigurationError(f"{name} needs exactly two distinct case names, got {list(value)}")
            object.__setattr__(self, name, tuple(value))
        object.__setattr__(self, "address_names", tuple(self.address_names))
        object.__setattr__(self, "hash_names", tuple(self.hash_names))


@dataclass
class GeneratorOptions:
    """Everything that tunes a single generation run."""
    output_dir: Path = Path("./types")
    hooks: bool = False
    legacy: bool = False
    max_depth: int = 256
    collision_limit: int = 64
    conventions: Conventions = field(default_factory=Conventions)
    module_name: Optional[str] = None

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        for name in ("max_depth", "collision_limit"):
            value = getattr(self, name)
            if type(value) != int or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

    def override(self, **changes: Any) -> "GeneratorOptions":
        """Copy with every change that is not ``None`` applied, the way command line flags
        take precedence over file values."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


_option_keys = {
    "outDir": "output_dir",
    "hooks": "hooks",
    "legacy": "legacy",
    "maxDepth": "max_depth",
    "collisionLimit": "collision_limit",
    "moduleName": "module_name",
}

_convention_keys = {
    "optionCases": "option_cases",
    "resultCases": "result_cases",
    "requirePath": "require_path",
    "addressNames": "address_names",
    "hashNames": "hash_names",
    "detectOption": "detect_option",
    "detectResult": "detect_result",
}


def _convert(section: Dict[str, Any], keys: Dict[str, str], where: str) -> Dict[str, Any]:
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{where}' must be an object")
    unknown = sorted(set(section) - set(keys) - ({"conventions"} if where == "typegen" else set()))
    if unknown:
        raise ConfigurationError(f"Unknown option(s) in '{where}': {', '.join(unknown)}")
    return {keys[k]: v for k, v in section.items() if k in keys}


def options_from_dict(data: Dict[str, Any]) -> GeneratorOptions:
    """Build options from a ``typegen`` section, keys spelled the way project files spell them."""
    values = _convert(data, _option_keys, "typegen")
    for name in ("hooks", "legacy"):
        if name in values and not isinstance(values[name], bool):
            raise ConfigurationError(f"'{name}' must be true or false")

    if "conventions" in data:
        conv = _convert(data["conventions"], _convention_keys, "conventions")
        try:
            values["conventions"] = Conventions(**conv)
        except TypeError as e:
            raise ConfigurationError(f"Invalid conventions: {e}") from e

    return GeneratorOptions(**values)


def load_options(source: Union[str, Path]) -> GeneratorOptions:
    """Read options from the ``typegen`` section of a JSON project file. A file without
    such a section gives the defaults."""
    path = Path(source)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read options file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {path} must hold a JSON object")

    section = data.get("typegen", {})
    log.debug("Loaded options from %s: %s", path, section)
    return options_from_dict(section)
