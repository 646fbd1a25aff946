"""Integration-test fixtures that keep provider traffic off the network."""

from __future__ import annotations

import pytest

from mockingbird.llm.gemini_client import GeminiClient, GeminiProviderError


@pytest.fixture(autouse=True)
def _block_gemini_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail any real Gemini request made by an integration test."""

    def _refuse_post(self, **kwargs: object) -> str:
        """Raise a transport failure instead of reaching the provider."""

        _ = self
        _ = kwargs
        raise GeminiProviderError("network disabled in tests", failure_kind="connection")

    monkeypatch.setattr(GeminiClient, "_post_json", _refuse_post)
