"""
Chat-completion oracle transport.

A thin wrapper over the OpenAI SDK: one request, one answer, no retries.
Failures of any kind surface as OracleUnavailable so callers have a single
thing to catch before applying their fallback.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import openai
from openai import OpenAI

from .errors import OracleUnavailable
from .logging_config import setup_logging

logger = setup_logging(__name__)


class ChatOracle:
    """Single-shot chat completions with fixed decoding parameters."""

    def __init__(self, client, model: str = "gpt-4o", temperature: float = 0.0, max_tokens: int = 30):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_request(self, system_message: str, user_prompt: str) -> Dict:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_message},
            {"role": "user", "content": user_prompt},
        ]
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def complete(self, system_message: str, user_prompt: str) -> str:
        """
        Send one prompt and return the stripped response content.

        Raises:
            OracleUnavailable: transport error, non-success status, or malformed body
        """
        request = self.build_request(system_message, user_prompt)
        try:
            response = self.client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            logger.error(f"Oracle call failed. Status: {e.status_code}, Response: {e.message}")
            raise OracleUnavailable(f"status {e.status_code}: {e.message}") from e
        except openai.OpenAIError as e:
            logger.error(f"Exception during oracle call. Details: {e}")
            raise OracleUnavailable(str(e)) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise OracleUnavailable(f"malformed response body: {e}") from e

        if not isinstance(content, str):
            raise OracleUnavailable("malformed response body: missing message content")

        return content.strip()


def build_oracle(
    api_key: Optional[str],
    model: str,
    temperature: float,
    max_tokens: int,
    base_url: Optional[str] = None,
) -> ChatOracle:
    """Create a ChatOracle backed by a real OpenAI client. SDK retries are disabled."""
    client = OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
    return ChatOracle(client, model=model, temperature=temperature, max_tokens=max_tokens)
