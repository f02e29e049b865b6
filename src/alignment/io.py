"""Read and write the persisted manipulation model (``manipulation.json``).

Reads are validated against a Draft-7 JSON schema.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

from jsonschema import Draft7Validator

from constants import Constants
from common.errors import ManipulationFileError
from .model import ManipulationModel

logger = logging.getLogger(__name__)

MANIPULATION_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "definitions": {
        "gav": {
            "type": "object",
            "required": ["groupId", "artifactId", "version"],
            "properties": {
                "groupId": {"type": "string"},
                "artifactId": {"type": "string"},
                "version": {"type": "string"},
            },
        },
        "node": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "group": {"type": ["string", "null"]},
                "name": {"type": "string", "minLength": 1},
                "version": {"type": ["string", "null"]},
                "alignedDependencies": {
                    "type": "object",
                    "additionalProperties": {"$ref": "#/definitions/gav"},
                },
                "availableUnalignedDependencies": {
                    "type": "object",
                    "additionalProperties": {"type": "array", "items": {"type": "string"}},
                },
                "children": {"type": "array", "items": {"$ref": "#/definitions/node"}},
            },
        },
    },
    "$ref": "#/definitions/node",
}


def manipulation_file_path(root_dir: Union[str, Path]) -> Path:
    """Location of the manipulation file for a build rooted at ``root_dir``."""
    return Path(root_dir) / Constants.MANIPULATION_FILE_NAME


def validate_model_data(data: Any) -> None:
    """Validate a decoded manipulation file; raise on the first problem."""
    validator = Draft7Validator(MANIPULATION_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ManipulationFileError(f"Invalid manipulation model at '{path}': {first.message}")


def read_manipulation_model(root_dir: Union[str, Path]) -> ManipulationModel:
    """Load the model persisted under ``root_dir``.

    Raises:
        ManipulationFileError: If the file is missing, unreadable or invalid.
    """
    path = manipulation_file_path(root_dir)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManipulationFileError(f"Manipulation file not found: {path}") from e
    except (OSError, ValueError) as e:
        raise ManipulationFileError(f"Unable to read manipulation file {path}: {e}") from e
    validate_model_data(data)
    return ManipulationModel.from_dict(data)


def write_manipulation_model(root_dir: Union[str, Path], model: ManipulationModel) -> Path:
    """Persist ``model`` under ``root_dir``, replacing any previous file."""
    path = manipulation_file_path(root_dir)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(model.to_dict(), f, ensure_ascii=False, indent=4)
        os.replace(tmp_path, path)
    except OSError as e:
        raise ManipulationFileError(f"Manipulation file couldn't be written to {path}: {e}") from e
    logger.info("Manipulation model has been written to: %s", path)
    return path
