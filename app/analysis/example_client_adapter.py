"""Offline analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalyzerFactory.
"""

import json
from typing import ClassVar

from app.analysis.client_base import BaseAnalysisClient


class ExampleClientAdapter(BaseAnalysisClient):
    """Adapter that returns a fixed, valid verdict JSON.

    No network calls. Useful for local development, tests, and running the
    dedup pipeline without provider credentials.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "issue_type": "UnclassifiedError",
        "root_cause": "Offline analysis: no provider was consulted.",
        "suggested_fix": "Configure an analysis provider for a real diagnosis.",
        "severity": "Low",
    }

    def __init__(self, response: dict[str, object] | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE
        self.calls = 0

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, json_schema
        self.calls += 1
        return json.dumps(self._response)
