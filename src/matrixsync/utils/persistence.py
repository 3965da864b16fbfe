"""Shared utilities for Pydantic model persistence.

Stateless helpers for reading and writing JSON documents and Pydantic
models. Used by the config model and by the pattern file codec.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class PydanticPersistence:
    """
    Utility class providing shared Pydantic persistence operations.

    Example Usage:
        ```python
        raw = PydanticPersistence.read_json(Path("config.json"))
        config = AppConfig.model_validate(raw)
        PydanticPersistence.save_json(config, Path("config.json"))
        ```
    """

    @staticmethod
    def read_json(path: Path) -> Any:
        """
        Read and decode a JSON file without validating it.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is empty
            json.JSONDecodeError: If the content is not JSON
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        content = path.read_text(encoding="utf-8")
        if not content.strip():
            raise ValueError(f"File is empty: {path}")

        data = json.loads(content)
        logger.debug(f"Read JSON document from {path}")
        return data

    @staticmethod
    def save_json(
        data: BaseModel,
        path: Path,
        indent: int = 2,
        create_parents: bool = True,
        by_alias: bool = False,
        exclude_none: bool = False,
    ) -> None:
        """
        Save a Pydantic model to a JSON file, overwriting any existing file.

        Raises:
            ValueError: If the file cannot be written
        """
        try:
            if create_parents and path.parent:
                path.parent.mkdir(parents=True, exist_ok=True)

            json_content = data.model_dump_json(indent=indent, by_alias=by_alias, exclude_none=exclude_none)
            path.write_text(json_content, encoding="utf-8")

            logger.debug(f"Saved {type(data).__name__} to {path}")

        except OSError as e:
            logger.error(f"Error saving {type(data).__name__} to {path}: {e}")
            raise ValueError(f"Failed to save {type(data).__name__}: {e}") from e
