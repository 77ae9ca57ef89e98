"""Tests for CLI argument parsing and command output."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from osintcafe import __version__
from osintcafe.analysis.diagnostics import ProbeResult
from osintcafe.cli import _build_parser, main
from osintcafe.constants import Capability


class TestArgParser:
    def test_version_flag(self) -> None:
        args = _build_parser().parse_args(["--version"])
        assert args.version is True

    def test_profile_options(self) -> None:
        args = _build_parser().parse_args(
            ["profile", "--name", "Ash", "--age", "31", "--bio", "Hi"]
        )
        assert args.command == "profile"
        assert args.name == "Ash"
        assert args.age == 31
        assert args.bio == "Hi"
        assert args.location is None

    def test_conversation_messages(self) -> None:
        args = _build_parser().parse_args(["conversation", "hi", "send money"])
        assert args.messages == ["hi", "send money"]
        assert args.file is None

    def test_image_defaults(self) -> None:
        args = _build_parser().parse_args(["image", "photo.png"])
        assert args.path == "photo.png"
        assert args.mime_type is None

    def test_threats_query(self) -> None:
        args = _build_parser().parse_args(["threats", "Ash Smith"])
        assert args.query == "Ash Smith"

    def test_probe_defaults_to_all(self) -> None:
        args = _build_parser().parse_args(["probe"])
        assert args.providers == []


def _run(argv: list[str]) -> None:
    with patch("sys.argv", ["osintcafe", *argv]):
        main()


class TestCommands:
    def test_version_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        _run(["--version"])
        assert capsys.readouterr().out.strip() == f"osintcafe {__version__}"

    def test_conversation_degrades_without_credentials(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run(["conversation", "hello", "can you wire money?"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["degraded"] is True
        assert payload["reason"] == "Unconfigured"
        assert payload["report"]["score"] == 60

    def test_conversation_from_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        transcript = tmp_path / "chat.txt"
        transcript.write_text("hello\n\nI had an accident\n", encoding="utf-8")
        _run(["conversation", "--file", str(transcript)])
        payload = json.loads(capsys.readouterr().out)
        assert payload["report"]["flags"] == ["Mentions: accident"]

    def test_conversation_without_messages_exits(self) -> None:
        with pytest.raises(SystemExit) as info:
            _run(["conversation"])
        assert info.value.code == 1

    def test_image_missing_file_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as info:
            _run(["image", str(tmp_path / "missing.jpg")])
        assert info.value.code == 1

    def test_image_unconfigured_is_high_risk(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        photo = tmp_path / "photo.png"
        photo.write_bytes(b"\x89PNG")
        _run(["image", str(photo)])
        payload = json.loads(capsys.readouterr().out)
        assert payload["report"]["risk_level"] == "high"

    def test_probe_unknown_provider_exits(self) -> None:
        with pytest.raises(SystemExit) as info:
            _run(["probe", "nonesuch"])
        assert info.value.code == 1

    def test_probe_prints_results(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        results = [
            ProbeResult("gemini", Capability.TEXT_RISK, True, "operational")
        ]
        _run_probe_with(results)
        payload = json.loads(capsys.readouterr().out)
        assert payload == [
            {
                "name": "gemini",
                "capability": "text-risk",
                "ok": True,
                "message": "operational",
            }
        ]


def _run_probe_with(results: list[ProbeResult]) -> None:
    async def fake_run_probes(providers, names=None):  # type: ignore[no-untyped-def]
        return results

    with patch("osintcafe.cli.run_probes", fake_run_probes):
        _run(["probe", "gemini"])
