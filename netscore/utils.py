"""JSON loading for the engine config and exported record files."""

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('netscore.utils')


def load_json(path: Path | str, schema: type[T] | None = None) -> Any | T:
    """
    Read a JSON file, validating it into schema when one is given.

    Raises:
        FileNotFoundError: No file at path
        json.JSONDecodeError: Malformed JSON
        ValueError: Data does not match schema
    """
    path = Path(path)
    logger.debug(f'Loading {path}')
    data = json.loads(path.read_text(encoding='utf-8'))
    if schema is None:
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def load_rows(path: Path | str) -> list:
    """
    Read an exported list of row objects. A missing file holds no rows.

    Raises:
        json.JSONDecodeError: Malformed JSON
        ValueError: The file holds something other than a list
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f'{path} not found; treating as empty')
        return []
    rows = load_json(path)
    if not isinstance(rows, list):
        raise ValueError(f'{path} must contain a JSON list, got {type(rows).__name__}')
    return rows
