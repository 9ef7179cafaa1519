"""
File loading for optimizer inputs.

Config and context files are YAML or JSON (JSON is valid YAML, so both go
through PyYAML).  History is a JSON array of workouts or JSONL with one
workout per line; unreadable JSONL lines are skipped with a warning.
"""

import json
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..core.history import sort_recent_first
from ..core.models import OptimizerConfig, SavedWorkout, TrainingContext
from .serializers import (
    ValidationError,
    dict_to_optimizer_config,
    dict_to_training_context,
    dicts_to_history,
)


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Error parsing {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"{path}: expected a mapping at the top level")
    return data


def load_config(path: str | Path) -> OptimizerConfig:
    """
    Load OptimizerConfig from a YAML/JSON file.

    An ``optimizer`` top-level key is unwrapped if present.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file or its values are invalid
    """
    data = _read_mapping(Path(path))
    if isinstance(data.get("optimizer"), dict):
        data = data["optimizer"]
    return dict_to_optimizer_config(data)


def load_context(path: str | Path) -> TrainingContext:
    """
    Load TrainingContext from a YAML/JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not a mapping
    """
    return dict_to_training_context(_read_mapping(Path(path)))


class HistoryStore:
    """
    Workout history stored as a JSON array or as JSONL.

    The format is detected from the first non-blank character: ``[`` means
    a JSON array, anything else is read line by line.
    """

    def __init__(self, history_path: str | Path):
        self.history_path = Path(history_path)

    def load_history(self) -> list[SavedWorkout]:
        """
        Load all workouts, most recent first (undated last).

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a JSON array file cannot be parsed
        """
        if not self.history_path.exists():
            raise FileNotFoundError(f"History file not found: {self.history_path}")

        with open(self.history_path, "r", encoding="utf-8") as f:
            text = f.read()

        if text.lstrip().startswith("["):
            try:
                records = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Error parsing {self.history_path}: {e}") from e
        else:
            records = []
            for line_num, line in enumerate(text.splitlines(), 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as e:
                    warnings.warn(
                        f"lift-optimizer: skipping line {line_num} in {self.history_path} ({e})",
                        stacklevel=2,
                    )

        return sort_recent_first(dicts_to_history(records))
