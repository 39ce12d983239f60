"""Configuration model for the sheetdb load pipeline.

Provides ``SheetDBConfig`` with all tunable parameters and sensible defaults.
Supports loading overrides from YAML or JSON files via the ``from_file()``
classmethod.
"""

from __future__ import annotations

import json
import pathlib
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class SheetDBConfig(BaseModel):
    """All tunable parameters with sensible defaults.

    Override individual values via constructor kwargs or load a complete
    config from a file with ``SheetDBConfig.from_file(path)``.
    """

    # --- Destination ---
    table_name: str = "data"

    # --- Column typing ---
    infer_formats: bool = False
    default_date_format: str = "%Y-%m-%d"
    number_storage_type: Literal["REAL", "INTEGER"] = "REAL"

    # --- Row import ---
    insert_batch_size: int = Field(default=1, ge=1)

    # --- Logging / PII safety ---
    log_sample_data: bool = False

    @classmethod
    def from_file(cls, path: str) -> SheetDBConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Any keys present in the file override the
        corresponding defaults; keys not present retain their defaults.

        Args:
            path: Filesystem path to the configuration file.

        Returns:
            A fully-populated ``SheetDBConfig`` instance.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the file extension is not recognized, the file
                does not hold a mapping, or a value fails validation.
            yaml.YAMLError: If a YAML file cannot be parsed.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Config file {path} must hold a mapping, got {type(data).__name__}"
            )

        return cls(**data)
