# subhub/services/chat_service.py
from __future__ import annotations

"""
SubHub SL — Site assistant (Gemini `generateContent` over httpx)

The conversation is replayed as Gemini `contents`: history must open with a
user turn, assistant turns map to role "model", and the new message goes last.
A missing `GEMINI_API_KEY` or a provider failure is returned as a structured
`ChatResult`, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field

from subhub.core.config import settings

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
NOT_CONFIGURED = "Gemini API Key is not configured."
SYSTEM_INSTRUCTION = (
    "You are SubHub AI, a helpful and friendly assistant for the SubHub SL website. "
    "SubHub SL is a cinematic catalog where users find movies, TV shows, Sinhala movies "
    "and Korean dramas with Sinhala subtitles. Help users find content, explain features "
    "like 'My List', and keep responses enthusiastic and concise."
)


class ChatTurn(BaseModel):
    role: str = Field(..., pattern="^(user|assistant|model)$")
    content: str = Field(..., min_length=1, max_length=4000)


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    history: List[ChatTurn] = Field(default_factory=list, max_length=50)


@dataclass
class ChatResult:
    success: bool
    reply: Optional[str] = None
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"reply": self.reply}
        return {"error": self.error}


def build_contents(history: Sequence[ChatTurn], message: str) -> List[Dict[str, Any]]:
    first_user = next((i for i, t in enumerate(history) if t.role == "user"), None)
    turns = list(history[first_user:]) if first_user is not None else []
    contents = [
        {"role": "user" if t.role == "user" else "model", "parts": [{"text": t.content}]} for t in turns
    ]
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


class ChatService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
    ) -> None:
        self._client = client
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.GEMINI_MODEL
        self.max_output_tokens = settings.GEMINI_MAX_OUTPUT_TOKENS if max_output_tokens is None else max_output_tokens

    async def reply(self, request: ChatRequest) -> ChatResult:
        if not self.api_key:
            return ChatResult(success=False, error=NOT_CONFIGURED)

        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": build_contents(request.history, request.message),
            "generationConfig": {"maxOutputTokens": self.max_output_tokens},
        }
        url = f"{GEMINI_API_BASE}/models/{self.model}:generateContent"
        try:
            resp = await self._client.post(url, json=payload, headers={"x-goog-api-key": self.api_key})
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Gemini request failed: %s", exc)
            return ChatResult(success=False, error="Failed to fetch response from AI.")

        text = _first_text(data)
        if text is None:
            logger.warning("Gemini returned no candidates: %s", data.get("promptFeedback"))
            return ChatResult(success=False, error="Failed to fetch response from AI.")
        return ChatResult(success=True, reply=text)


def _first_text(data: Dict[str, Any]) -> Optional[str]:
    for candidate in data.get("candidates") or []:
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts)
        if text:
            return text
    return None


__all__ = ["ChatService", "ChatRequest", "ChatTurn", "ChatResult", "build_contents", "NOT_CONFIGURED"]
