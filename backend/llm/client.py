"""
LLM client wrapper for an OpenAI-compatible chat completions API.
Handles request retries, response cleaning and JSON extraction.
"""
import json
import time
import requests
import logging
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass

from utils.config import config, LLMConfig
from utils.cleaning import ResponseCleaner

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Structured response from LLM."""
    content: str
    is_valid: bool
    raw_response: Dict[str, Any]


class LLMClient:
    """
    Client for a /chat/completions endpoint (OpenAI or Azure OpenAI style).
    """

    def __init__(self, llm_config: Optional[LLMConfig] = None):
        self.config = llm_config or config.llm
        self.completion_url = self.config.completion_url
        self.timeout = self.config.timeout
        self.max_retries = self.config.max_retries
        logger.info(f"LLM Client initialized: {self.completion_url} (timeout={self.timeout}s)")

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            if self.config.auth_style == "azure":
                headers["api-key"] = self.config.api_key
            else:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _make_request(self, payload: Dict[str, Any]) -> Any:
        """Make HTTP request to LLM server with retries."""
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                response = requests.post(
                    self.completion_url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()
            except requests.exceptions.Timeout as e:
                last_error = e
                if attempt < self.max_retries:
                    time.sleep(1 * (attempt + 1))
            except requests.exceptions.RequestException as e:
                last_error = e
                if attempt < self.max_retries:
                    time.sleep(0.5 * (attempt + 1))

        raise ConnectionError(f"Failed to reach LLM server after {self.max_retries + 1} attempts: {last_error}")

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The user message
            max_tokens: Maximum tokens to generate (None uses default)
            temperature: Sampling temperature (None uses default)

        Returns:
            LLMResponse with the raw message content; invalid when the request
            failed or the body is not a chat completion
        """
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens or self.config.default_max_tokens,
            "temperature": self.config.default_temperature if temperature is None else temperature,
        }

        try:
            response = self._make_request(payload)
        except ConnectionError as e:
            logger.warning(f"LLM request failed: {e}")
            return LLMResponse(content="", is_valid=False, raw_response={"error": str(e)})

        if not isinstance(response, dict):
            logger.warning(f"Unexpected LLM response body: {str(response)[:200]}")
            return LLMResponse(content="", is_valid=False, raw_response={"body": response})

        content = self._message_content(response)
        return LLMResponse(
            content=content,
            is_valid=bool(content.strip()),
            raw_response=response,
        )

    @staticmethod
    def _message_content(response: Dict[str, Any]) -> str:
        """First choice's message content, or "" when the shape is off."""
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return ""
        content = message.get("content")
        return content if isinstance(content, str) else ""

    def generate_question(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 200,
    ) -> Tuple[str, bool]:
        """
        Generate an interview question with full cleaning.

        Returns:
            Tuple of (cleaned_question, is_valid)
        """
        logger.info("Generating question via LLM...")
        response = self.generate(system_prompt, user_prompt, max_tokens=max_tokens, temperature=0.7)

        if not response.is_valid:
            logger.warning(f"LLM response invalid: {response.raw_response}")
            return "", False

        cleaned, is_valid = ResponseCleaner.clean_question(response.content)
        logger.info(f"Cleaned response (valid={is_valid}): {cleaned[:100] if cleaned else 'EMPTY'}")

        return cleaned, is_valid

    def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 400,
        temperature: float = 0.3,
    ) -> Tuple[Optional[Dict], bool]:
        """
        Generate JSON response from LLM.

        Returns:
            Tuple of (parsed_json, is_valid)
        """
        response = self.generate(system_prompt, user_prompt, max_tokens=max_tokens, temperature=temperature)

        if not response.is_valid:
            return None, False

        cleaned = ResponseCleaner.clean_json_response(response.content)

        try:
            parsed = json.loads(cleaned)
            return parsed, True
        except json.JSONDecodeError:
            # Try to fix common issues
            try:
                fixed = cleaned.replace(",}", "}").replace(",]", "]")
                parsed = json.loads(fixed)
                return parsed, True
            except json.JSONDecodeError:
                logger.warning(f"Could not parse JSON from LLM: {cleaned[:200]}")
                return None, False

    def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 800,
    ) -> Tuple[str, bool]:
        """Generate free-form text (reports), reasoning stripped."""
        response = self.generate(system_prompt, user_prompt, max_tokens=max_tokens, temperature=0.7)
        if not response.is_valid:
            return "", False
        cleaned = ResponseCleaner.strip_reasoning(response.content)
        return cleaned, bool(cleaned)


# Global client instance
llm_client = LLMClient()
