import json
from pathlib import Path

import pytest

from app.logging.logger import Log
from app.main import main, parse_args


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECORD_STORE", "memory")
    monkeypatch.setenv("ANALYSIS_PROVIDER", "example")
    monkeypatch.setattr(Log, "configure", lambda log_level: None)


def _json_lines(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args(["a.log"])
        assert args.files == [Path("a.log")]
        assert args.history is None
        assert args.init_schema is False
        assert args.workers == 1

    def test_history_without_limit(self) -> None:
        assert parse_args(["--history"]).history == 200

    def test_history_with_limit(self) -> None:
        assert parse_args(["--history", "5"]).history == 5


class TestMain:
    def test_duplicate_files_are_analyzed_once(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        first = tmp_path / "a.log"
        second = tmp_path / "b.log"
        first.write_bytes(b"ERROR disk full on 10.0.0.7\n")
        second.write_bytes(b"ERROR disk full on 10.0.0.7\n")

        exit_code = main([str(first), str(second)])

        lines = _json_lines(capsys.readouterr().out)
        assert exit_code == 0
        assert [line["status"] for line in lines] == ["processed", "duplicate"]
        assert lines[0]["submission_id"] == lines[1]["submission_id"]
        assert lines[1]["file"] == str(second)

    def test_rejected_file_sets_exit_code(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        empty = tmp_path / "empty.log"
        empty.write_bytes(b"")

        exit_code = main([str(empty), str(tmp_path / "missing.log")])

        lines = _json_lines(capsys.readouterr().out)
        assert exit_code == 1
        assert [line["status"] for line in lines] == ["rejected", "rejected"]
        assert "empty" in str(lines[0]["error"])

    def test_history_is_printed_after_submissions(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "a.log"
        path.write_bytes(b"WARN slow query\n")

        exit_code = main([str(path), "--history"])

        lines = _json_lines(capsys.readouterr().out)
        assert exit_code == 0
        assert lines[0]["status"] == "processed"
        assert lines[1]["original_name"] == "a.log"
        assert lines[1]["issue_type"] == "UnclassifiedError"
