"""
Client for the hosted language model that writes mood recommendations.

Speaks the OpenAI compatible chat-completions protocol, so any gateway
exposing it (OpenRouter, a self hosted proxy, ...) can be configured with
LLM_API_URL / LLM_API_KEY / LLM_MODEL.
"""
import json
import logging
import os
import re
from typing import Dict, List, Optional

import requests
from dotenv import load_dotenv
from fastapi import HTTPException, status

load_dotenv()
logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
PAYMENT_REQUIRED_MESSAGE = "Payment required. Please add credits to continue."
PARSE_FAILURE_MESSAGE = "Failed to parse AI recommendations"

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


class RecommendationParseError(HTTPException):
    """The model reply did not contain a usable JSON array."""

    def __init__(self, detail: str = PARSE_FAILURE_MESSAGE):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class LLMService:
    API_URL = os.getenv("LLM_API_URL", "https://openrouter.ai/api/v1/chat/completions")
    API_KEY = os.getenv("LLM_API_KEY")
    MODEL = os.getenv("LLM_MODEL", "google/gemini-2.5-flash")
    TIMEOUT = 30

    @classmethod
    def is_configured(cls) -> bool:
        return bool(cls.API_KEY)

    @classmethod
    def complete(cls, system_prompt: str, user_prompt: str) -> str:
        """
        Run one chat completion and return the assistant text.

        Raises:
            HTTPException: 429 / 402 mirrored from the gateway, 502 otherwise
        """
        headers = {
            "Authorization": f"Bearer {cls.API_KEY}",
            "Content-Type": "application/json",
            "X-Title": "MoodFlix",
        }
        payload = {
            "model": cls.MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.8,
            "max_tokens": 3000,
        }

        try:
            response = requests.post(cls.API_URL, headers=headers, json=payload, timeout=cls.TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.error(f"LLM gateway unreachable: {str(e)}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"AI service error: {str(e)}")

        if response.status_code == 429:
            logger.warning("LLM gateway rate limited the request")
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=RATE_LIMIT_MESSAGE)
        if response.status_code == 402:
            logger.warning("LLM gateway reports exhausted credits")
            raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=PAYMENT_REQUIRED_MESSAGE)
        if not response.ok:
            logger.error(f"LLM gateway error {response.status_code}: {response.text[:500]}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"AI service error: {response.status_code}"
            )

        try:
            return response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError):
            logger.error("LLM gateway returned an unexpected payload")
            raise RecommendationParseError()


def extract_json_array(text: Optional[str]) -> List[Dict]:
    """
    Pull the first JSON array of objects out of a model reply.
    Models wrap arrays in prose or code fences; everything outside the
    outermost brackets is ignored.

    Raises:
        RecommendationParseError: when no parseable array is present
    """
    match = _JSON_ARRAY.search(text or "")
    if not match:
        logger.error(f"No JSON array in AI reply: {(text or '')[:200]!r}")
        raise RecommendationParseError()
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.error(f"Unparseable JSON array in AI reply: {match.group(0)[:200]!r}")
        raise RecommendationParseError()
    if not isinstance(parsed, list):
        raise RecommendationParseError()
    return [item for item in parsed if isinstance(item, dict)]
