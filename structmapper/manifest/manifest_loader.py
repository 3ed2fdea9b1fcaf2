import json
import os
from importlib import resources
from pathlib import Path
from typing import Optional

import tomli as toml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from structmapper import logging as structmapper_logging
from structmapper.c_parser.struct_info import PUBLIC, FieldInfo, StructInfo

logger = structmapper_logging.get_logger(__name__)

MANIFEST_SUFFIXES = (".json", ".toml")
_SCHEMA_CACHE: Optional[dict] = None


class ManifestError(ValueError):
    pass


def is_manifest(path: str) -> bool:
    return Path(path).suffix.lower() in MANIFEST_SUFFIXES


def load_schema() -> dict:
    global _SCHEMA_CACHE
    if _SCHEMA_CACHE is not None:
        return _SCHEMA_CACHE
    schema_resource = resources.files("structmapper.manifest").joinpath("schema.json")
    with schema_resource.open("r", encoding="utf-8") as f:
        _SCHEMA_CACHE = json.load(f)
    return _SCHEMA_CACHE


def validate_manifest(data: dict) -> None:
    """Raises ManifestError with the first schema violation."""
    validator = Draft202012Validator(load_schema())
    error = best_match(validator.iter_errors(data))
    if error is not None:
        location = "/".join(str(p) for p in error.absolute_path) or "<root>"
        raise ManifestError(f"schema:{location}: {error.message}")


def _read_manifest(path: Path) -> dict:
    try:
        if path.suffix.lower() == ".toml":
            with open(path, "rb") as f:
                return toml.load(f)
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (toml.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Cannot parse manifest {path}: {exc}") from exc


def _directives(raw: list) -> list[list[str]]:
    return [[entry] if isinstance(entry, str) else list(entry) for entry in raw]


def _field(raw) -> FieldInfo:
    if isinstance(raw, str):
        return FieldInfo(raw)
    return FieldInfo(
        raw["name"],
        access=raw.get("visibility", PUBLIC),
        ignore=raw.get("ignore", False),
        rename=raw.get("rename"),
        type_spelling=raw.get("type", ""),
    )


def structs_from_manifest(data: dict, base_dir: str = "", source: str = "<manifest>") -> list[StructInfo]:
    validate_manifest(data)
    structs = []
    for position, raw in enumerate(data["types"]):
        header = raw.get("header", "")
        if header and base_dir and not os.path.isabs(header):
            header = os.path.normpath(os.path.join(base_dir, header))
        structs.append(StructInfo(
            raw["name"],
            qualified_name=raw.get("qualified_name"),
            spelling=raw.get("spelling"),
            location=f"{source}:types[{position}]",
            header=header,
            fields=[_field(member) for member in raw.get("members", [])],
            map_from=_directives(raw.get("map_from", [])),
            map_to=_directives(raw.get("map_to", [])),
        ))
    return structs


def load_manifest(path: str) -> list[StructInfo]:
    """Load struct declarations from a JSON or TOML manifest.

    Relative `header` entries are resolved against the manifest's directory.
    """
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Could not find manifest {path}")
    data = _read_manifest(manifest_path)
    structs = structs_from_manifest(data, base_dir=str(manifest_path.parent.resolve()), source=str(manifest_path))
    logger.debug("Loaded %d types from manifest %s", len(structs), path)
    return structs
