import asyncio
import base64
import os
import requests
from dotenv import load_dotenv
from ...domain.errors import ExtractionError
from ...domain.models import ExtractedNotice
from ...domain.ports import ExtractorPort
from .prompt import FIELDS, PROMPT, parse_notice_json

API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
HEADERS = {"Content-Type": "application/json"}


def build_payload(png_bytes: bytes) -> dict:
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": PROMPT},
                    {"inlineData": {"mimeType": "image/png", "data": base64.b64encode(png_bytes).decode("ascii")}},
                ],
            }
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": {
                "type": "OBJECT",
                "properties": {name: {"type": "STRING"} for name in FIELDS},
                "required": list(FIELDS),
            },
        },
    }


class GeminiExtractor(ExtractorPort):
    def __init__(self) -> None:
        load_dotenv()
        self._api_key = os.getenv("GEMINI_API_KEY")
        if not self._api_key:
            raise RuntimeError("GEMINI_API_KEY must be set")
        self._model = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

    async def extract(self, png_bytes: bytes) -> ExtractedNotice:
        url = API_URL.format(model=self._model)
        try:
            print(f"[extractor] POST {url}")
            resp = await asyncio.to_thread(
                requests.post,
                url,
                params={"key": self._api_key},
                json=build_payload(png_bytes),
                headers=HEADERS,
                timeout=60,
            )
            print(f"[extractor] Status: {resp.status_code}")
            resp.raise_for_status()
            result = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ExtractionError(f"AI request failed: {e}") from e

        try:
            text = result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise ExtractionError("AI response did not contain summary data")
        return parse_notice_json(text)
