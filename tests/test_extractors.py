# tests/test_extractors.py
import asyncio
import json
from unittest.mock import MagicMock, patch
import pytest
import requests
from src.adapters.extractor.gemini_extractor import GeminiExtractor, build_payload
from src.adapters.extractor.prompt import parse_notice_json
from src.adapters.notifier.discord_notifier import split_into_chunks
from src.domain.errors import ExtractionError


def test_parse_notice_json_fills_missing_fields():
    notice = parse_notice_json(json.dumps({"summary": "AI course", "applicationPeriod": "2024.3.1 ~ 2024.3.8", "target": None}))
    assert notice.summary == "AI course"
    assert notice.application_period == "2024.3.1 ~ 2024.3.8"
    assert notice.training_period == ""
    assert notice.target == ""


@pytest.mark.parametrize("text", [None, "", "not json", "[1, 2]"])
def test_parse_notice_json_rejects_malformed(text):
    with pytest.raises(ExtractionError):
        parse_notice_json(text)


def test_gemini_payload_requires_all_fields():
    payload = build_payload(b"\x89PNG")
    schema = payload["generationConfig"]["responseSchema"]
    assert schema["required"] == ["summary", "applicationPeriod", "trainingPeriod", "target"]
    assert payload["contents"][0]["parts"][1]["inlineData"]["mimeType"] == "image/png"


def _gemini(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return GeminiExtractor()


@pytest.mark.asyncio
async def test_gemini_extract_reads_first_candidate(monkeypatch):
    body = {"summary": "Coding camp", "applicationPeriod": "24.5.1~24.5.10", "trainingPeriod": "June", "target": "Students"}
    resp = MagicMock(status_code=200)
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": json.dumps(body)}]}}]}
    with patch("src.adapters.extractor.gemini_extractor.requests.post", return_value=resp) as post:
        notice = await _gemini(monkeypatch).extract(b"png")
    assert notice.target == "Students"
    assert post.call_args.kwargs["params"] == {"key": "test-key"}


@pytest.mark.asyncio
async def test_gemini_http_failure_raises_extraction_error(monkeypatch):
    resp = MagicMock(status_code=500)
    resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    with patch("src.adapters.extractor.gemini_extractor.requests.post", return_value=resp):
        with pytest.raises(ExtractionError):
            await _gemini(monkeypatch).extract(b"png")


@pytest.mark.asyncio
async def test_gemini_empty_candidates_raises(monkeypatch):
    resp = MagicMock(status_code=200)
    resp.json.return_value = {"candidates": []}
    with patch("src.adapters.extractor.gemini_extractor.requests.post", return_value=resp):
        with pytest.raises(ExtractionError):
            await _gemini(monkeypatch).extract(b"png")


def test_gemini_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with patch("src.adapters.extractor.gemini_extractor.load_dotenv"):
        with pytest.raises(RuntimeError):
            GeminiExtractor()


def test_split_into_chunks_prefers_newlines():
    text = ("x" * 1500) + "\n" + ("y" * 1000)
    chunks = split_into_chunks(text)
    assert chunks == ["x" * 1500, "y" * 1000]
    assert split_into_chunks("short") == ["short"]


@pytest.mark.asyncio
async def test_openai_extract_runs_client_off_the_event_loop():
    from src.adapters.extractor.openai_extractor import OpenAIExtractor

    extractor = OpenAIExtractor.__new__(OpenAIExtractor)
    extractor._model = "gpt-4o-mini"
    extractor._client = MagicMock()
    extractor._client.responses.create.return_value = MagicMock(
        output_text=json.dumps({"summary": "S", "applicationPeriod": "", "trainingPeriod": "", "target": "Staff"})
    )
    with patch("src.adapters.extractor.openai_extractor.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
        notice = await extractor.extract(b"png")
    assert notice.target == "Staff"
    to_thread.assert_called_once()


@pytest.mark.asyncio
async def test_openai_client_failure_raises_extraction_error():
    from src.adapters.extractor.openai_extractor import OpenAIExtractor

    extractor = OpenAIExtractor.__new__(OpenAIExtractor)
    extractor._model = "gpt-4o-mini"
    extractor._client = MagicMock()
    extractor._client.responses.create.side_effect = RuntimeError("no responses api")
    extractor._client.chat.completions.create.side_effect = RuntimeError("quota exceeded")
    with pytest.raises(ExtractionError):
        await extractor.extract(b"png")
