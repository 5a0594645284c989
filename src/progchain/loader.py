"""
Descriptor Loader (Raw Templates → Program objects).

Reads program templates from a directory tree. Each template is a JSON
(or YAML) document describing one tool, or a list of them:

    {
        "program": "subfinder",
        "input": [["domain"]],
        "output": ["subdomain"],
        "commands": ["subfinder -d {domain} -silent"],
        "comments": ["Passive subdomain enumeration"],
        "filter": "",
        "regex": {"subdomain": "^(\\\\S+)$"}
    }

Field Notes:
    - "input" is a list of alternative bundles; [] means "needs nothing"
    - "commands", "comments", "filter", "regex" are carried through unchanged
    - Program ids must be unique across the whole tree
"""

from __future__ import annotations

import json
import logging
import os
import warnings
from typing import Any, Dict, Iterable, List

import yaml

from progchain.model import Program, ProgramMetadata

logger = logging.getLogger(__name__)

TEMPLATE_EXTENSIONS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


class LoaderError(Exception):
    """Raised when a descriptor is malformed or ids collide."""
    pass


def _string_list(value: Any, field_name: str, program_id: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise LoaderError(f"Program {program_id!r}: '{field_name}' must be a list of strings")
    return list(value)


def program_from_dict(d: Dict[str, Any]) -> Program:
    """
    Build a Program from one descriptor dict.

    Raises:
        LoaderError: If the id is missing/empty or a field has the wrong shape
    """
    if not isinstance(d, dict):
        raise LoaderError(f"Descriptor must be a mapping, got {type(d).__name__}")

    program_id = d.get("program")
    if not isinstance(program_id, str) or not program_id.strip():
        raise LoaderError("Descriptor is missing a non-empty 'program' id")
    program_id = program_id.strip()

    raw_input = d.get("input") or []
    if not isinstance(raw_input, list):
        raise LoaderError(f"Program {program_id!r}: 'input' must be a list of parameter lists")

    requirement_sets = []
    for bundle in raw_input:
        names = _string_list(bundle, "input", program_id)
        if not names:
            warnings.warn(
                f"Program {program_id!r} has an empty input bundle; it will be always invokable",
                UserWarning,
            )
        requirement_sets.append(frozenset(names))

    regex = d.get("regex") or {}
    if not isinstance(regex, dict):
        raise LoaderError(f"Program {program_id!r}: 'regex' must be a mapping")

    metadata = ProgramMetadata(
        commands=_string_list(d.get("commands"), "commands", program_id),
        comments=_string_list(d.get("comments"), "comments", program_id),
        filter=d.get("filter") or "",
        regex={str(k): str(v) for k, v in regex.items()},
    )

    return Program(
        id=program_id,
        requirement_sets=requirement_sets,
        outputs=set(_string_list(d.get("output"), "output", program_id)),
        metadata=metadata,
    )


def check_unique_ids(programs: Iterable[Program]) -> None:
    """
    Raises:
        LoaderError: If two programs share an id
    """
    seen = set()
    duplicates = set()
    for program in programs:
        if program.id in seen:
            duplicates.add(program.id)
        seen.add(program.id)
    if duplicates:
        raise LoaderError(f"Duplicate program ids: {sorted(duplicates)}")


def load_programs_from_string(content: str, fmt: str = "json") -> List[Program]:
    """
    Parse one template document.

    Args:
        content: Document text
        fmt: "json" or "yaml"

    Returns:
        Programs in document order

    Raises:
        LoaderError: If the document cannot be parsed or is malformed
    """
    try:
        if fmt == "json":
            data = json.loads(content)
        elif fmt == "yaml":
            data = yaml.safe_load(content)
        else:
            raise LoaderError(f"Unsupported template format: {fmt!r}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LoaderError(f"Failed to parse {fmt} template: {e}") from e

    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise LoaderError("Template must hold a descriptor or a list of descriptors")

    programs = [program_from_dict(d) for d in data]
    check_unique_ids(programs)
    return programs


def load_program_file(filepath: str) -> List[Program]:
    """
    Parse a single template file; the format follows its extension.

    Raises:
        FileNotFoundError: If the file doesn't exist
        LoaderError: If parsing fails
    """
    ext = os.path.splitext(filepath)[1].lower()
    fmt = TEMPLATE_EXTENSIONS.get(ext)
    if fmt is None:
        raise LoaderError(f"Unsupported template extension: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        content = f.read()

    try:
        return load_programs_from_string(content, fmt=fmt)
    except LoaderError as e:
        raise LoaderError(f"{filepath}: {e}") from e


def load_programs(directory: str) -> List[Program]:
    """
    Load every template under `directory`, recursively.

    Files are read in sorted path order; files with other extensions are
    skipped.

    Raises:
        FileNotFoundError: If the directory doesn't exist
        LoaderError: On malformed templates or duplicate ids
    """
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Templates directory not found: {directory}")

    programs: List[Program] = []
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            if os.path.splitext(name)[1].lower() not in TEMPLATE_EXTENSIONS:
                continue
            path = os.path.join(root, name)
            logger.debug("Reading template %s", path)
            programs.extend(load_program_file(path))

    check_unique_ids(programs)
    logger.info("Loaded %d program(s) from %s", len(programs), directory)
    return programs


__all__ = [
    "LoaderError",
    "program_from_dict",
    "check_unique_ids",
    "load_programs_from_string",
    "load_program_file",
    "load_programs",
]
