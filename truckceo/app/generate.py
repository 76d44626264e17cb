#!/usr/bin/env python3
"""
Generation module for the TruckCEO assistant.

Thin client for the Gemini ``generateContent`` REST endpoint. Callers build
the request body; this module sends it and pulls text, function calls and
grounding chunks out of the response.
"""

import requests
from typing import Any, Dict, List, Optional
from .config import Config
from ..utils.logger import get_logger

logger = get_logger()

API_ROOT = "https://generativelanguage.googleapis.com/v1beta/models"


class GenerationError(Exception):
    """The hosted model call failed or returned an unusable response."""


class GenerationClient:
    """Client for generating content using the Gemini API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[int] = None, http=None):
        """Initialize the generation client."""
        self.api_key = api_key or Config.GEMINI_API_KEY
        self.llm_model = model or Config.GEMINI_MODEL
        self.timeout = timeout or Config.GEMINI_TIMEOUT
        self.http = http or requests.Session()
        self.api_base_url = f"{API_ROOT}/{self.llm_model}:generateContent"

        if not self.api_key:
            raise ValueError("Gemini API key is required")

    def generate_content(self, prompt: str, generation_config: Optional[Dict[str, Any]] = None,
                         tools: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """
        Send a single-turn prompt and return the decoded response body.

        Args:
            prompt: User-turn text
            generation_config: Optional ``generationConfig`` block
            tools: Optional ``tools`` block (function declarations, grounding)

        Returns:
            Response JSON

        Raises:
            GenerationError: on transport errors or a non-200 status
        """
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if generation_config:
            payload["generationConfig"] = generation_config
        if tools:
            payload["tools"] = tools

        logger.debug(f"Sending request to Gemini model {self.llm_model}, prompt length: {len(prompt)}")
        try:
            response = self.http.post(
                self.api_base_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"Error calling Gemini: {e}") from e

        if response.status_code != 200:
            logger.debug(f"Error response body: {response.text}")
            raise GenerationError(f"Gemini returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise GenerationError(f"Gemini returned invalid JSON: {e}") from e


def _first_candidate(data: Dict[str, Any]) -> Dict[str, Any]:
    candidates = data.get("candidates") or []
    return candidates[0] if candidates else {}


def _parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    return (_first_candidate(data).get("content") or {}).get("parts") or []


def extract_text(data: Dict[str, Any]) -> str:
    """Concatenated text parts of the first candidate ('' when none)."""
    return "".join(p.get("text", "") for p in _parts(data)).strip()


def extract_function_calls(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [p["functionCall"] for p in _parts(data) if "functionCall" in p]


def extract_grounding(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    metadata = _first_candidate(data).get("groundingMetadata") or {}
    return metadata.get("groundingChunks") or []
