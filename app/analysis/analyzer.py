"""AI-powered diagnostic log analyzer."""

import json
from pathlib import Path
from typing import ClassVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.analysis.base import BaseAnalyzer
from app.analysis.client_base import BaseAnalysisClient
from app.analysis.exceptions import AnalysisError
from app.analysis.models import Verdict
from app.analysis.prompt_loader import (
    load_json_schema,
    load_prompt_template,
    load_system_prompt,
)
from app.analysis.validator import validate_and_build
from app.logging.logger import Log


class Analyzer(BaseAnalyzer):
    """Turns sanitized log text into a Verdict using an AI provider.

    Temperature is pinned to 0 so identical input yields the same verdict
    wherever the provider allows it. Failed attempts are retried up to
    *max_retries* times before the last AnalysisError is raised.
    """

    TEMPERATURE: ClassVar[float] = 0.0
    MAX_RETRY_WAIT_SECONDS: ClassVar[float] = 10.0

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        max_retries: int = 2,
        retry_wait_seconds: float = 1.0,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt_path: Path | None = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self._client = client
        self._model = model
        self._max_retries = max_retries
        self._retry_wait_seconds = retry_wait_seconds
        self._system_prompt = load_system_prompt(system_prompt_path)
        self._prompt_template = load_prompt_template(prompt_template_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    @property
    def model(self) -> str:
        return self._model

    def analyze(self, sanitized_text: str) -> Verdict:
        """Analyze *sanitized_text*, retrying on any AnalysisError."""
        retrying = Retrying(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(
                multiplier=self._retry_wait_seconds,
                max=self.MAX_RETRY_WAIT_SECONDS,
            ),
            retry=retry_if_exception_type(AnalysisError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        verdict = retrying(self._analyze_once, sanitized_text)
        Log.info(
            "Analysis complete",
            issue_type=verdict.issue_type,
            severity=verdict.severity,
            model=self._model,
        )
        return verdict

    def _analyze_once(self, sanitized_text: str) -> Verdict:
        prompt = self._build_prompt(sanitized_text)
        Log.debug(f"Analysis prompt:\n{prompt}")

        raw_response = self._call_ai(prompt)
        Log.debug(f"AI raw response:\n{raw_response}")

        parsed = self._parse_json(raw_response)
        return validate_and_build(parsed, produced_by=self._model)

    def _build_prompt(self, sanitized_text: str) -> str:
        return self._prompt_template.format(
            sanitized_log=sanitized_text,
            json_schema=self._json_schema,
        )

    def _call_ai(self, prompt: str) -> str:
        return self._client.create_chat_completion(
            model=self._model,
            temperature=self.TEMPERATURE,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema_dict,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        Log.warning(
            "Analysis attempt failed, retrying",
            attempt=retry_state.attempt_number,
            max_attempts=self._max_retries + 1,
            error=exc,
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            # Some providers wrap the object in prose; fall back to the outermost braces.
            start, end = cleaned.find("{"), cleaned.rfind("}")
            if start < 0 or end <= start:
                raise AnalysisError(f"Invalid JSON response: {exc}") from exc
            try:
                parsed = json.loads(cleaned[start:end + 1])
            except json.JSONDecodeError as inner:
                raise AnalysisError(f"Invalid JSON response: {inner}") from inner

        if not isinstance(parsed, dict):
            raise AnalysisError("JSON response must be an object")
        return parsed
