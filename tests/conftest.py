from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
# Make the shared fixtures package and src/ importable without an install
for extra in (TESTS_DIR, TESTS_DIR.parent / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Point the workspace at tmp_path and drop ambient overrides."""

    monkeypatch.setenv("TRIVIA_QUIZ_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("TRIVIA_QUIZ_CONFIG", raising=False)
    yield
    names = ["trivia_quiz"] + [
        name
        for name in list(logging.Logger.manager.loggerDict)
        if name.startswith("trivia_quiz.")
    ]
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
