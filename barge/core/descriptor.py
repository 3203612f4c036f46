# SPDX-License-Identifier: MIT
"""Project descriptor (barge.json).

The descriptor is the single persisted configuration unit of a project.
It is loaded fresh on every invocation and never mutated afterwards.

Optional fields that are absent from the file stay None in memory, so
that dumping a loaded descriptor writes back exactly what was read.
Consumers ask for effective values through ProjectDescriptor.effective(),
which is the one place defaults are applied:

    descriptor = load("barge.json")
    descriptor.c_standard               # None when not set in the file
    descriptor.effective("c_standard")  # "c11"
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from barge.core.errors import ConfigError
from barge.toolchains.toolchain import Toolset

DESCRIPTOR_FILE = "barge.json"


class ArtifactKind(Enum):
    """What the project links into; stored under the 'project_type' key."""

    EXECUTABLE = "executable"
    SHARED_LIBRARY = "shared_library"
    STATIC_LIBRARY = "static_library"

    def artifact_name(self, name: str) -> str:
        """File name of the artifact for a project called `name`."""
        if self is ArtifactKind.SHARED_LIBRARY:
            return f"lib{name}.so"
        if self is ArtifactKind.STATIC_LIBRARY:
            return f"lib{name}.a"
        return name

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PackageLookup:
    """Library resolved through pkg-config."""

    name: str


@dataclass(frozen=True)
class ManualLibrary:
    """Library given as literal compile and link flags."""

    cflags: str = ""
    ldflags: str = ""


LibraryDependency = PackageLookup | ManualLibrary


# All defaults live here; nothing else in barge hard-codes them.
DEFAULTS: dict[str, Any] = {
    "version": "0.1.0",
    "description": "",
    "authors": (),
    "toolset": Toolset.LLVM,
    "c_standard": "c11",
    "cpp_standard": "c++17",
    "fortran_standard": "f2003",
    "cobol_standard": "cobol2014",
    "external_libraries": (),
    "custom_cflags": "",
    "custom_cxxflags": "",
    "custom_fortranflags": "",
    "custom_cobolflags": "",
    "custom_ldflags": "",
    "custom_makeopts": None,
    "format_style": "Google",
    "pre_build_steps": (),
    "post_build_steps": (),
}

_STRING_FIELDS = (
    "version",
    "description",
    "c_standard",
    "cpp_standard",
    "fortran_standard",
    "cobol_standard",
    "custom_cflags",
    "custom_cxxflags",
    "custom_fortranflags",
    "custom_cobolflags",
    "custom_ldflags",
    "custom_makeopts",
    "format_style",
)

_STRING_LIST_FIELDS = ("authors", "pre_build_steps", "post_build_steps")


@dataclass(frozen=True)
class ProjectDescriptor:
    """Typed view of barge.json.

    Attributes:
        name: Project name; used for artifact naming.
        project_type: Artifact kind (executable, shared or static library).
        Every other attribute is None when absent from the file.
    """

    name: str
    project_type: ArtifactKind
    version: str | None = None
    description: str | None = None
    authors: tuple[str, ...] | None = None
    toolset: Toolset | None = None
    c_standard: str | None = None
    cpp_standard: str | None = None
    fortran_standard: str | None = None
    cobol_standard: str | None = None
    external_libraries: tuple[LibraryDependency, ...] | None = None
    custom_cflags: str | None = None
    custom_cxxflags: str | None = None
    custom_fortranflags: str | None = None
    custom_cobolflags: str | None = None
    custom_ldflags: str | None = None
    custom_makeopts: str | None = None
    format_style: str | None = None
    pre_build_steps: tuple[str, ...] | None = None
    post_build_steps: tuple[str, ...] | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def effective(self, key: str) -> Any:
        """Value of a field, or its documented default when absent."""
        value = getattr(self, key)
        if value is None:
            return DEFAULTS.get(key)
        return value

    @property
    def artifact_kind(self) -> ArtifactKind:
        return self.project_type

    @property
    def artifact_name(self) -> str:
        return self.project_type.artifact_name(self.name)

    @property
    def effective_toolset(self) -> Toolset:
        toolset: Toolset = self.effective("toolset")
        return toolset


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ConfigError(f"required field '{key}' is missing")
    return data[key]


def _string(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"field '{key}' must be a string")
    return value


def _string_list(value: Any, key: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigError(f"field '{key}' must be a list of strings")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"field '{key}' entries must be strings")
    return tuple(value)


def _enum(enum_cls: type[Enum], value: Any, key: str) -> Any:
    if isinstance(value, str):
        for member in enum_cls:
            if member.value == value:
                return member
    choices = ", ".join(str(m.value) for m in enum_cls)
    raise ConfigError(f"field '{key}' has invalid value {value!r} (expected one of: {choices})")


def _library(value: Any, index: int) -> LibraryDependency:
    where = f"external_libraries[{index}]"
    if not isinstance(value, dict):
        raise ConfigError(f"{where} must be an object")
    kind = value.get("type")
    if kind == "pkg_config":
        return PackageLookup(name=_string(_require(value, "name"), f"{where}.name"))
    if kind == "manual":
        return ManualLibrary(
            cflags=_string(_require(value, "cflags"), f"{where}.cflags"),
            ldflags=_string(_require(value, "ldflags"), f"{where}.ldflags"),
        )
    raise ConfigError(
        f"{where} has invalid type {kind!r} (expected one of: pkg_config, manual)"
    )


def parse(data: Any) -> ProjectDescriptor:
    """Build a descriptor from decoded JSON.

    Unknown keys are kept in `extra` but otherwise ignored.

    Raises:
        ConfigError: If a required key is absent or a value is invalid.
    """
    if not isinstance(data, dict):
        raise ConfigError("project descriptor must be a JSON object")

    kwargs: dict[str, Any] = {
        "name": _string(_require(data, "name"), "name"),
        "project_type": _enum(ArtifactKind, _require(data, "project_type"), "project_type"),
    }
    if not kwargs["name"]:
        raise ConfigError("field 'name' must not be empty")

    for key in _STRING_FIELDS:
        if data.get(key) is not None:
            kwargs[key] = _string(data[key], key)
    for key in _STRING_LIST_FIELDS:
        if data.get(key) is not None:
            kwargs[key] = _string_list(data[key], key)
    if data.get("toolset") is not None:
        kwargs["toolset"] = _enum(Toolset, data["toolset"], "toolset")
    if data.get("external_libraries") is not None:
        libraries = data["external_libraries"]
        if not isinstance(libraries, list):
            raise ConfigError("field 'external_libraries' must be a list")
        kwargs["external_libraries"] = tuple(
            _library(entry, i) for i, entry in enumerate(libraries)
        )

    known = {"name", "project_type", "toolset", "external_libraries"}
    known.update(_STRING_FIELDS, _STRING_LIST_FIELDS)
    kwargs["extra"] = {k: v for k, v in data.items() if k not in known}
    return ProjectDescriptor(**kwargs)


def load(path: Path | str = DESCRIPTOR_FILE) -> ProjectDescriptor:
    """Load a project descriptor from disk.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid JSON,
            or fails validation.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"project file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"could not read {path}: {e}") from e
    return parse(data)


def to_dict(descriptor: ProjectDescriptor) -> dict[str, Any]:
    """Serializable form of a descriptor; absent optional fields are omitted."""
    data: dict[str, Any] = {
        "name": descriptor.name,
        "project_type": descriptor.project_type.value,
    }
    for key in _STRING_FIELDS:
        value = getattr(descriptor, key)
        if value is not None:
            data[key] = value
    for key in _STRING_LIST_FIELDS:
        value = getattr(descriptor, key)
        if value is not None:
            data[key] = list(value)
    if descriptor.toolset is not None:
        data["toolset"] = descriptor.toolset.value
    if descriptor.external_libraries is not None:
        entries: list[dict[str, str]] = []
        for library in descriptor.external_libraries:
            if isinstance(library, PackageLookup):
                entries.append({"type": "pkg_config", "name": library.name})
            else:
                entries.append(
                    {"type": "manual", "cflags": library.cflags, "ldflags": library.ldflags}
                )
        data["external_libraries"] = entries
    return data


def dump(descriptor: ProjectDescriptor) -> str:
    """Serialize a descriptor to pretty-printed JSON text."""
    return json.dumps(to_dict(descriptor), indent=2) + "\n"


def save(descriptor: ProjectDescriptor, path: Path | str = DESCRIPTOR_FILE) -> None:
    """Write a descriptor to disk."""
    Path(path).write_text(dump(descriptor), encoding="utf-8")
