"""Natural-language reasoning client using Claude or Google Gemini.

Every call is a single attempt bounded by a timeout. Failures never raise;
they come back as one of the ReasoningResult variants so callers can fall
back to their deterministic path.
"""

import json
import logging

from models.reasoning import (
    ReasoningMalformed, ReasoningOk, ReasoningResult, ReasoningTimeout, ReasoningTransportError,
)

logger = logging.getLogger(__name__)

ANTHROPIC = "anthropic"
GEMINI = "gemini"
DEFAULT_MODELS = {
    ANTHROPIC: "claude-sonnet-4-20250514",
    GEMINI: "gemini-2.0-flash",
}


def extract_json(response_text: str) -> str:
    """Pull the JSON payload out of a markdown-fenced or bare response."""
    if "```json" in response_text:
        return response_text.split("```json")[1].split("```")[0].strip()
    if "```" in response_text:
        return response_text.split("```")[1].split("```")[0].strip()
    return response_text.strip()


def parse_json_object(response_text: str | None) -> ReasoningResult:
    if not response_text:
        return ReasoningMalformed(raw="", reason="Empty response")
    try:
        data = json.loads(extract_json(response_text))
    except json.JSONDecodeError as e:
        return ReasoningMalformed(raw=response_text[:500], reason=f"Invalid JSON: {e}")
    if not isinstance(data, dict):
        return ReasoningMalformed(raw=response_text[:500])
    return ReasoningOk(data=data)


class ReasoningClient:
    """Single-shot JSON requests against an LLM provider."""

    def __init__(self, provider: str = ANTHROPIC, api_key: str = None,
                 model: str = None, timeout: float = 20.0):
        if provider not in DEFAULT_MODELS:
            raise ValueError(f"Unsupported reasoning provider: {provider}")
        self.provider = provider
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[provider]
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "ReasoningClient":
        from config import (
            ANTHROPIC_API_KEY, GOOGLE_API_KEY,
            REASONING_MODEL, REASONING_PROVIDER, REASONING_TIMEOUT,
        )
        provider = REASONING_PROVIDER.lower()
        key = GOOGLE_API_KEY if provider == GEMINI else ANTHROPIC_API_KEY
        return cls(provider=provider, api_key=key, model=REASONING_MODEL or None,
                   timeout=REASONING_TIMEOUT)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and not self.api_key.startswith("your_")

    def request_json(self, system_prompt: str, user_prompt: str) -> ReasoningResult:
        if not self.is_configured:
            return ReasoningTransportError(error=f"{self.provider} API key not configured")

        try:
            if self.provider == GEMINI:
                text = self._gemini_request(system_prompt, user_prompt)
            else:
                text = self._claude_request(system_prompt, user_prompt)
        except Exception as e:
            if self._is_timeout(e):
                logger.warning(f"{self.provider} reasoning call timed out after {self.timeout}s")
                return ReasoningTimeout(timeout=self.timeout)
            logger.warning(f"{self.provider} reasoning call failed: {e}")
            return ReasoningTransportError(error=str(e))

        result = parse_json_object(text)
        if isinstance(result, ReasoningMalformed):
            logger.warning(f"Failed to parse {self.provider} JSON response: {result.reason}")
        return result

    def _claude_request(self, system_prompt: str, user_prompt: str) -> str:
        import anthropic

        client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        message = client.messages.create(
            model=self.model,
            max_tokens=1000,
            temperature=0.3,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        return message.content[0].text

    def _gemini_request(self, system_prompt: str, user_prompt: str) -> str:
        import google.generativeai as genai

        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model, system_instruction=system_prompt)
        response = model.generate_content(
            user_prompt,
            generation_config={"temperature": 0.3},
            request_options={"timeout": self.timeout},
        )
        return response.text

    def _is_timeout(self, exc: Exception) -> bool:
        if isinstance(exc, TimeoutError):
            return True
        if self.provider == GEMINI:
            from google.api_core.exceptions import DeadlineExceeded
            return isinstance(exc, DeadlineExceeded)
        import anthropic
        return isinstance(exc, anthropic.APITimeoutError)
