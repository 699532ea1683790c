from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?")
# A newline with an even number of quotes after it sits outside any string
_NEWLINE_OUTSIDE_STRING = re.compile(r'\n(?=(?:[^"]*"[^"]*")*[^"]*$)')


class ContentProviderError(Exception):
    """Generic error from the generative content provider."""
    pass


def parse_poem_json(text: str) -> Dict[str, Any]:
    """
    Parse the provider's JSON answer.

    Markdown fences are stripped. If the first parse fails, newlines outside
    strings become spaces and literal newlines inside strings are escaped,
    then parsing is retried once.
    """
    cleaned = _FENCE.sub("", text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning(f"Failed to parse JSON from provider, retrying with escaped newlines: {text!r}")
        fixed = _NEWLINE_OUTSIDE_STRING.sub(" ", cleaned)
        fixed = fixed.replace("\n", "\\n").replace("\r", "\\r")
        try:
            data = json.loads(fixed)
        except json.JSONDecodeError as e:
            raise ContentProviderError("Failed to generate valid JSON") from e

    if not isinstance(data, dict):
        raise ContentProviderError("Failed to generate valid JSON")
    return data


class GeminiClient:
    """
    Minimal client for the Gemini ``generateContent`` REST API.

    One instance per API key; every user brings their own key.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        text_model: str,
        image_model: str,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.text_model = text_model
        self.image_model = image_model
        self.timeout = timeout

    def _generate(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ContentProviderError("Gemini API key not configured.")

        url = f"{self.base_url.rstrip('/')}/models/{model}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ContentProviderError(f"Error contacting Gemini: {e}") from e

        if resp.status_code != 200:
            raise ContentProviderError(f"Gemini returned {resp.status_code}: {resp.text}")

        try:
            return resp.json()
        except ValueError as e:
            raise ContentProviderError(f"Invalid JSON from Gemini: {e}") from e

    @staticmethod
    def _parts(data: Dict[str, Any]) -> list:
        try:
            return data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ContentProviderError(f"Unexpected Gemini response shape: {data}") from e

    def generate_poem(self, image: bytes, mime_type: str, prompt: str) -> Dict[str, Any]:
        """Ask for a poem about ``image``; returns the parsed JSON object."""
        payload = {
            "contents": [{
                "parts": [
                    {"text": prompt},
                    {"inline_data": {
                        "mime_type": mime_type,
                        "data": base64.b64encode(image).decode("ascii"),
                    }},
                ],
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "maxOutputTokens": 300,
                "thinkingConfig": {"thinkingBudget": 0},
            },
        }
        data = self._generate(self.text_model, payload)
        text = "".join(part.get("text", "") for part in self._parts(data))
        return parse_poem_json(text)

    def generate_sketch(self, prompt: str) -> bytes:
        """Ask the image model for a sketch; returns the raw image bytes."""
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        data = self._generate(self.image_model, payload)

        for part in self._parts(data):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                return base64.b64decode(inline["data"])
        raise ContentProviderError("Gemini returned no image data")
