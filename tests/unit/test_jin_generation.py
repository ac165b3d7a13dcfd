"""Unit tests for the command line entry point."""

import json
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

import jin_generation
from configuration import configuration


def write_transcript(path: Path, lines: list[str]) -> str:
    """Write a JSON lines transcript and return its filename."""
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def test_argument_parser_defaults() -> None:
    """Test default values of command line arguments."""
    args = jin_generation.create_argument_parser().parse_args([])
    assert args.verbose is False
    assert args.dump_configuration is False
    assert args.config_file == "jin-generation.yaml"
    assert args.replay_file is None


def test_replay_transcript(tmp_path: Path) -> None:
    """Test folding a recorded transcript."""
    filename = write_transcript(
        tmp_path / "stream.jsonl",
        [
            json.dumps({"type": "thinking", "text": "hmm"}),
            json.dumps({"type": "text", "text": "Hel"}),
            json.dumps({"type": "text", "text": "lo"}),
            "",
            json.dumps({"type": "tool_call", "tool_call": {"id": "1", "name": "f"}}),
            json.dumps(
                {"type": "tool_call", "tool_call": {"id": "1", "arguments": {"a": 1}}}
            ),
        ],
    )

    result = jin_generation.replay_transcript(filename)

    assert result["content"] == [
        {"type": "thinking", "thinking": {"text": "hmm", "signature": None}},
        {"type": "text", "text": "Hello"},
    ]
    assert result["tool_calls"] == [
        {"id": "1", "name": "f", "arguments": {"a": 1}, "signature": None}
    ]
    assert result["search_activities"] == []


def test_replay_skips_malformed_lines(tmp_path: Path) -> None:
    """Test that malformed lines do not stop the replay."""
    filename = write_transcript(
        tmp_path / "stream.jsonl",
        [
            json.dumps({"type": "text", "text": "a"}),
            "{broken",
            json.dumps({"type": "unknown"}),
            json.dumps({"type": "text", "text": "b"}),
        ],
    )

    result = jin_generation.replay_transcript(filename)

    assert result["content"] == [{"type": "text", "text": "ab"}]


def test_main_replay(tmp_path: Path, mocker: MockerFixture) -> None:
    """Test the replay command printing the result as JSON."""
    print_json = mocker.patch("jin_generation.print_json")
    filename = write_transcript(
        tmp_path / "stream.jsonl", [json.dumps({"type": "text", "text": "hi"})]
    )

    jin_generation.main(["-c", str(tmp_path / "missing.yaml"), "-r", filename])

    print_json.assert_called_once()
    output = print_json.call_args.kwargs["data"]
    assert output["content"] == [{"type": "text", "text": "hi"}]
    assert configuration.configuration.name == "jin"


def test_main_dump_configuration(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test dumping the loaded configuration."""
    config_file = tmp_path / "jin.yaml"
    config_file.write_text("name: dumped\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    jin_generation.main(["-c", str(config_file), "-d"])

    with open(tmp_path / "configuration.json", encoding="utf-8") as fin:
        content = json.load(fin)
    assert content["name"] == "dumped"
