import asyncio
import base64
import os
from typing import Optional
from dotenv import load_dotenv
from ...domain.errors import ExtractionError
from ...domain.models import ExtractedNotice
from ...domain.ports import ExtractorPort
from .prompt import PROMPT, parse_notice_json


class OpenAIExtractor(ExtractorPort):
    def __init__(self) -> None:
        load_dotenv()
        # Lazy import to avoid hard dependency if not used
        from openai import OpenAI  # type: ignore

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY must be set")
        self._client = OpenAI(api_key=api_key)
        self._model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    def _ask(self, data_url: str) -> Optional[str]:
        # Use responses API; if not available in installed version, fall back to chat.completions
        try:
            result = self._client.responses.create(
                model=self._model,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_text", "text": PROMPT},
                            {"type": "input_image", "image_url": data_url},
                        ],
                    }
                ],
                text={"format": {"type": "json_object"}},
            )
            return getattr(result, "output_text", None)
        except Exception as e:
            print(f"[extractor] responses API failed ({e}); trying chat.completions")
            chat = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": PROMPT},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
                response_format={"type": "json_object"},
                temperature=0,
            )
            return chat.choices[0].message.content

    async def extract(self, png_bytes: bytes) -> ExtractedNotice:
        data_url = "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
        try:
            text = await asyncio.to_thread(self._ask, data_url)
        except Exception as e:
            print(f"[extractor] OpenAI error: {e}")
            raise ExtractionError(f"AI request failed: {e}") from e
        return parse_notice_json(text)
