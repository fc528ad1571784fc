"""JSON file helpers and money rounding."""

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('pokerledger.utils')


def load_json(path: Path | str, schema: type[T] | None = None) -> Any | T:
    """
    Read a JSON file, validating it against a pydantic model if given.

    Args:
        path: File to read
        schema: Optional model such as LedgerConfig

    Returns:
        The decoded JSON, or a model instance when schema is given

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If schema validation fails
    """
    path = Path(path)
    logger.debug(f'Loading JSON from: {path}')
    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    if schema is None:
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'Invalid settings in {path}: {e}')
        raise ValueError(f'Invalid settings in {path}:\n{e}') from e


def save_json(path: Path | str, data: Any) -> None:
    """Write data (plain JSON types or a pydantic model) as indented JSON, creating parent dirs."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, BaseModel):
        data = data.model_dump(mode='json')
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.debug(f'Saved JSON to: {path}')


def round_money(value: float) -> float:
    """Round an amount to cents, folding -0.0 into 0.0."""
    return round(value, 2) + 0.0
