from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console

from fixtures import make_payload, make_raw_question
from trivia_quiz import cli


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


class _FakeOpenAI:
    def __init__(self, content: str) -> None:
        self.requests: list[dict] = []
        self.chat = SimpleNamespace(
            completions=SimpleNamespace(create=self._create)
        )
        self._content = content

    def _create(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def console(monkeypatch: pytest.MonkeyPatch) -> Console:
    recorder = Console(record=True, width=100, force_terminal=True)
    monkeypatch.setattr(cli, "_make_console", lambda: recorder)
    return recorder


def _script(monkeypatch: pytest.MonkeyPatch, commands: list[str]) -> None:
    monkeypatch.setattr(
        cli, "_make_input_provider", lambda _console: make_provider(commands)
    )


def _read_log(workspace: Path) -> list[dict]:
    log_path = workspace / "logs" / "trivia.log"
    return [
        json.loads(line)
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]


def test_play_runs_a_full_game(tmp_path, monkeypatch, console) -> None:
    payload = make_payload(make_raw_question() for _ in range(5))
    fake = _FakeOpenAI(payload)
    monkeypatch.setattr(cli, "load_client", lambda base_url=None: fake)
    commands = ["start"]
    for _ in range(5):
        commands += ["a", "", ""]
    _script(monkeypatch, commands + ["quit"])
    workspace = tmp_path / "ws"

    code = cli.main(
        [
            "play",
            "--workspace",
            str(workspace),
            "--category",
            "Science",
            "--category",
            "Space",
            "--difficulty",
            "hard",
        ]
    )

    assert code == 0
    rendered = console.export_text()
    assert "5/5" in rendered
    assert "100% Correct" in rendered
    assert "Excellent!" in rendered
    prompt = fake.requests[0]["messages"][1]["content"]
    assert "Categories: Science, Space" in prompt
    assert "Difficulty: hard" in prompt
    assert fake.requests[0]["model"] == "gpt-4o-mini"
    messages = [entry["message"] for entry in _read_log(workspace)]
    assert "trivia play finished" in messages
    assert "Game finished" in messages


def test_play_reports_generation_failure(
    tmp_path, monkeypatch, console
) -> None:
    fake = _FakeOpenAI("I cannot help with that.")
    monkeypatch.setattr(cli, "load_client", lambda base_url=None: fake)
    _script(monkeypatch, ["1", "start", "quit"])

    code = cli.main(["play", "--workspace", str(tmp_path / "ws")])

    assert code == 0
    rendered = console.export_text()
    assert "Generation failed" in rendered
    assert "Thanks for playing!" in rendered


def test_play_without_api_key_exits_1(tmp_path, monkeypatch, capsys) -> None:
    def _missing(base_url=None):
        raise RuntimeError("OPENAI_API_KEY not found in environment.")

    monkeypatch.setattr(cli, "load_client", _missing)

    code = cli.main(["play", "--workspace", str(tmp_path / "ws")])

    assert code == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().err


def test_play_passes_api_base(tmp_path, monkeypatch, console) -> None:
    config_path = tmp_path / "trivia.toml"
    config_path.write_text(
        '[providers.openai]\napi_base = "http://localhost:9000/v1"\n',
        encoding="utf-8",
    )
    seen: dict[str, object] = {}

    def _load(base_url=None):
        seen["base_url"] = base_url
        return _FakeOpenAI("{}")

    monkeypatch.setattr(cli, "load_client", _load)
    _script(monkeypatch, ["quit"])

    code = cli.main(
        [
            "play",
            "--config",
            str(config_path),
            "--workspace",
            str(tmp_path / "ws"),
        ]
    )

    assert code == 0
    assert seen["base_url"] == "http://localhost:9000/v1"


def test_play_rejects_unknown_category(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        cli, "load_client", lambda base_url=None: _FakeOpenAI("{}")
    )

    code = cli.main(
        [
            "play",
            "--workspace",
            str(tmp_path / "ws"),
            "--category",
            "Cooking",
        ]
    )

    assert code == 2
    assert "Unknown category 'Cooking'" in capsys.readouterr().err


def test_play_rejects_bad_config(tmp_path, capsys) -> None:
    config_path = tmp_path / "broken.toml"
    config_path.write_text("[quiz]\nbogus = 1\n", encoding="utf-8")

    code = cli.main(["play", "--config", str(config_path)])

    assert code == 2
    assert "Unknown configuration key" in capsys.readouterr().err


def test_config_init_and_path(tmp_path, capsys) -> None:
    workspace = tmp_path / "ws"
    target = workspace / "config" / "trivia.toml"

    assert cli.main(["config", "path", "--workspace", str(workspace)]) == 0
    out = capsys.readouterr().out
    assert str(target) in out
    assert "not created yet" in out

    assert cli.main(["config", "init", "--workspace", str(workspace)]) == 0
    assert target.exists()
    assert "Created template" in capsys.readouterr().out

    assert cli.main(["config", "init", "--workspace", str(workspace)]) == 2
    assert "already exists" in capsys.readouterr().err

    code = cli.main(
        ["config", "init", "--workspace", str(workspace), "--force"]
    )
    assert code == 0

    assert cli.main(["config", "path", "--workspace", str(workspace)]) == 0
    assert "not created yet" not in capsys.readouterr().out


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.strip()


def test_play_rejects_invalid_difficulty(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["play", "--difficulty", "extreme"])
    assert exc.value.code == 2


def test_play_repeated_category_stays_selected(
    tmp_path, monkeypatch, console
) -> None:
    fake = _FakeOpenAI("not json")
    monkeypatch.setattr(cli, "load_client", lambda base_url=None: fake)
    _script(monkeypatch, ["start", "quit"])

    code = cli.main(
        [
            "play",
            "--workspace",
            str(tmp_path / "ws"),
            "--category",
            "Science",
            "--category",
            "Science",
        ]
    )

    assert code == 0
    assert len(fake.requests) == 1
    prompt = fake.requests[0]["messages"][1]["content"]
    assert "- Categories: Science\n" in prompt
    assert "Please select at least one category!" not in console.export_text()
