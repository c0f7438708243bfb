import logging
from typing import Optional
from google import genai
from google.genai import types
from examprep.config import config

logger = logging.getLogger(__name__)

_client = None

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def get_gemini_client(api_key: Optional[str] = None) -> genai.Client:
    """Get or create singleton Gemini client"""
    global _client
    if _client is None:
        api_key = api_key or config.GEMINI_API_KEY
        if not api_key:
            raise ValueError("GEMINI_API_KEY environment variable not set")
        _client = genai.Client(api_key=api_key)
        logger.info("Gemini client initialized")
    return _client


def safety_settings():
    return [
        types.SafetySetting(
            category=category,
            threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
        )
        for category in SAFETY_CATEGORIES
    ]


class GeminiTextGenerator:
    """
    Text generation backed by Gemini.

    One generate_content call per prompt; retries and timeouts are left to
    the caller and the SDK.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        client: Optional[genai.Client] = None,
    ):
        self.model = model or config.GEMINI_GENERATION_MODEL
        self.temperature = config.GEMINI_TEMPERATURE if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or config.GEMINI_MAX_OUTPUT_TOKENS
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = get_gemini_client()
        return self._client

    def generate(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        logger.info("Calling %s with a %d character prompt", self.model, len(prompt))
        result = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
                safety_settings=safety_settings(),
            ),
        )

        text = result.text if result is not None and result.text else ""
        logger.info("Generated %d characters", len(text))
        return text
