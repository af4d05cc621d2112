"""Tests for prompt template and JSON schema loading."""

import json
from pathlib import Path

import pytest

from app.analysis.exceptions import AnalysisError
from app.analysis.prompt_loader import load_json_schema, load_prompt_template, load_system_prompt


class TestLoadPromptTemplate:
    def test_loads_default_template(self) -> None:
        template = load_prompt_template()
        assert "{sanitized_log}" in template
        assert "{json_schema}" in template

    def test_loads_custom_template(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.txt"
        custom.write_text("Analyze {sanitized_log}")
        assert load_prompt_template(custom) == "Analyze {sanitized_log}"

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(AnalysisError, match="Failed to load prompt"):
            load_prompt_template(Path("/nonexistent/file.txt"))


class TestLoadSystemPrompt:
    def test_loads_default_system_prompt(self) -> None:
        prompt = load_system_prompt()
        assert prompt
        assert prompt == prompt.strip()

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(AnalysisError, match="Failed to load system prompt"):
            load_system_prompt(Path("/nonexistent/system.txt"))


class TestLoadJsonSchema:
    def test_loads_default_schema(self) -> None:
        schema = json.loads(load_json_schema())
        assert schema["type"] == "object"
        assert set(schema["required"]) == {"issue_type", "root_cause", "suggested_fix", "severity"}
        assert schema["properties"]["severity"]["enum"] == ["Low", "Medium", "High", "Critical"]

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(AnalysisError, match="Failed to load JSON schema"):
            load_json_schema(Path("/nonexistent/schema.json"))
