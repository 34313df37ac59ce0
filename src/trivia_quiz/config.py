"""TOML configuration for the trivia CLI.

The defaults tree below is deep-copied, the user's TOML is merged over it
(unknown keys are rejected), and the result is validated into frozen
dataclasses. A missing file at the default workspace location simply means
"use the defaults".
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

import tomllib

from trivia_quiz.core import workspace as workspace_mod
from trivia_quiz.game.errors import QuizValidationError
from trivia_quiz.game.models import (
    DEFAULT_CATEGORIES,
    DEFAULT_QUESTION_COUNTS,
    Difficulty,
    GameRules,
    SessionConfig,
)

CONFIG_PATH_ENV = "TRIVIA_QUIZ_CONFIG"
CONFIG_FILENAME = "trivia.toml"


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizSettings:
    categories: tuple[str, ...]
    question_counts: tuple[int, ...]
    default_difficulty: Difficulty
    default_question_count: int

    def rules(self) -> GameRules:
        return GameRules(
            categories=self.categories,
            question_counts=self.question_counts,
        )

    def session_config(self) -> SessionConfig:
        return SessionConfig(
            difficulty=self.default_difficulty,
            question_count=self.default_question_count,
        )


@dataclass(frozen=True)
class OpenAIConfig:
    model: str
    temperature: float
    max_output_tokens: int
    request_timeout_seconds: int
    api_base: Optional[str]


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class TriviaConfig:
    quiz: QuizSettings
    openai: OpenAIConfig
    logging: LoggingConfig
    source: Optional[Path] = None


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        if isinstance(base[key], MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted, type(value).__name__
                    )
                )
            _merge_dict(base[key], value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_float_range(
    value: Any, *, field: str, min_value: float, max_value: float
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field}' must be a number.")
    number = float(value)
    if not min_value <= number <= max_value:
        raise ConfigError(
            f"'{field}' must be between {min_value} and {max_value}."
        )
    return number


def _build_quiz(section: Mapping[str, Any]) -> QuizSettings:
    raw_categories = section.get("categories")
    if not isinstance(raw_categories, list) or not raw_categories:
        raise ConfigError("'quiz.categories' must be a non-empty list.")
    categories = tuple(
        _require_string(item, field="quiz.categories[]")
        for item in raw_categories
    )
    if len(set(categories)) != len(categories):
        raise ConfigError("'quiz.categories' must not repeat a label.")

    raw_counts = section.get("question_counts")
    if not isinstance(raw_counts, list) or not raw_counts:
        raise ConfigError("'quiz.question_counts' must be a non-empty list.")
    counts = tuple(
        _require_positive_int(item, field="quiz.question_counts[]")
        for item in raw_counts
    )

    try:
        difficulty = Difficulty.parse(section.get("default_difficulty"))
    except QuizValidationError as exc:
        raise ConfigError(f"'quiz.default_difficulty': {exc}") from exc

    default_count = _require_positive_int(
        section.get("default_question_count"),
        field="quiz.default_question_count",
    )
    if default_count not in counts:
        raise ConfigError(
            "'quiz.default_question_count' must be one of "
            "'quiz.question_counts'."
        )
    return QuizSettings(
        categories=categories,
        question_counts=counts,
        default_difficulty=difficulty,
        default_question_count=default_count,
    )


def _build_openai(section: Mapping[str, Any]) -> OpenAIConfig:
    api_base = section.get("api_base")
    if api_base is not None:
        api_base = _require_string(api_base, field="providers.openai.api_base")
    return OpenAIConfig(
        model=_require_string(
            section.get("model"), field="providers.openai.model"
        ),
        temperature=_require_float_range(
            section.get("temperature"),
            field="providers.openai.temperature",
            min_value=0.0,
            max_value=2.0,
        ),
        max_output_tokens=_require_positive_int(
            section.get("max_output_tokens"),
            field="providers.openai.max_output_tokens",
        ),
        request_timeout_seconds=_require_positive_int(
            section.get("request_timeout_seconds"),
            field="providers.openai.request_timeout_seconds",
        ),
        api_base=api_base,
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def _build_config(
    tree: Mapping[str, Any], *, source: Optional[Path]
) -> TriviaConfig:
    providers = tree["providers"]
    if providers.get("default") != "openai":
        raise ConfigError("providers.default must be 'openai'.")
    return TriviaConfig(
        quiz=_build_quiz(tree["quiz"]),
        openai=_build_openai(providers["openai"]),
        logging=_build_logging(tree["logging"]),
        source=source,
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> tuple[Path, bool]:
    """Return the config path and whether the caller asked for it explicitly."""

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve(), True
    env_override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if env_override:
        return Path(env_override).expanduser().resolve(), True
    layout = workspace_mod.ensure_workspace(
        env=env_map, path=workspace_path, create=False
    )
    return layout.path_for("config") / CONFIG_FILENAME, False


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace_path: Optional[Path] = None,
) -> TriviaConfig:
    """Load the TOML config, applying defaults and validation."""

    path, required = resolve_config_path(
        explicit_path=explicit_path, env=env, workspace_path=workspace_path
    )
    tree = default_tree()
    if not required and not path.exists():
        return _build_config(tree, source=None)
    toml_data = _load_toml(path)
    _merge_dict(tree, toml_data)
    return _build_config(tree, source=path)


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    path.write_text(config_template(), encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:
        pass
    return path


_DEFAULTS: Dict[str, Any] = {
    "quiz": {
        "categories": list(DEFAULT_CATEGORIES),
        "question_counts": list(DEFAULT_QUESTION_COUNTS),
        "default_difficulty": "medium",
        "default_question_count": 5,
    },
    "providers": {
        "default": "openai",
        "openai": {
            "model": "gpt-4o-mini",
            "temperature": 0.7,
            "max_output_tokens": 4000,
            "request_timeout_seconds": 60,
            "api_base": None,
        },
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


_CONFIG_TEMPLATE = """
# Trivia quiz configuration

[quiz]
# Categories offered on the setup screen
categories = [
  "Science", "History", "Geography", "Sports", "Movies", "Music",
  "Literature", "Art", "Technology", "Food", "Animals", "Space",
]
# Allowed number of questions per game
question_counts = [5, 10, 15, 20]
# easy, medium or hard
default_difficulty = "medium"
default_question_count = 5

[providers]
default = "openai"

[providers.openai]
model = "gpt-4o-mini"
# Sampling temperature (0.0-2.0)
temperature = 0.7
max_output_tokens = 4000
# Generation counts as failed after this many seconds
request_timeout_seconds = 60
# Optional API base override
# api_base = "https://api.openai.com/v1"

[logging]
level = "INFO"
verbose = false
"""
