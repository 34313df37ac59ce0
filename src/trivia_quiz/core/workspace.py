"""Per-user data home holding trivia configuration and logs."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping


WORKSPACE_ENV = "TRIVIA_QUIZ_HOME"
DEFAULT_WORKSPACE = Path.home() / ".trivia-quiz"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
}


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace root plus its named sub-directories."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Resolve the workspace and, when ``create`` is set, build it on disk.

    An explicit ``path`` wins over ``TRIVIA_QUIZ_HOME``. When neither is given
    and the default home is not writable, a directory under the system temp
    dir is used instead.
    """

    env_map = os.environ if env is None else env
    base, explicit = _resolve_home(env_map, override=path)

    candidates = [base]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "trivia-quiz")

    failure: Exception | None = None
    for candidate in candidates:
        try:
            return _build_layout(candidate, create=create)
        except PermissionError as exc:
            failure = exc
    raise WorkspaceError(f"Unable to prepare workspace at {base}") from failure


def _resolve_home(
    env: Mapping[str, str], *, override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return override.expanduser().absolute(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().absolute(), True
    return DEFAULT_WORKSPACE, False


def _build_layout(base: Path, *, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {base}"
        )

    created: MutableMapping[str, bool] = {"home": create and _make_dir(base)}
    directories: MutableMapping[str, Path] = {}
    for key, relative in _SUBDIRS.items():
        target = base / relative
        if create:
            created[key] = _make_dir(target)
        else:
            created[key] = False
            if target.exists() and not target.is_dir():
                raise WorkspaceError(
                    f"Expected workspace directory for '{key}' but found a "
                    f"file: {target}"
                )
        directories[key] = target

    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
        created=MappingProxyType(dict(created)),
    )


def _make_dir(path: Path) -> bool:
    existed = path.exists()
    if existed and not path.is_dir():
        raise WorkspaceError(
            f"Expected directory but found a non-directory entry: {path}"
        )
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return not existed
