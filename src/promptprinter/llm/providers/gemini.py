"""Managed Gemini API backend (google-genai SDK)."""

from google import genai
from google.genai.types import GenerateContentConfig

from promptprinter.llm.client import ModelBackend, parse_analysis_response
from promptprinter.llm.prompts import build_single_turn_prompt
from promptprinter.models.analysis import AnalysisResult
from promptprinter.models.config import GeminiConfig
from promptprinter.services.exceptions import AnalysisFailed
from promptprinter.utils.logging import get_logger

logger = get_logger(__name__)


class GeminiBackend(ModelBackend):
    """
    Gemini backend.

    Availability is a credential-presence check only: a real request would
    consume quota. Analysis sends the directive and the draft as a single
    user turn with JSON response mode.
    """

    name = "gemini"

    def __init__(self, config: GeminiConfig, output_language: str):
        self.config = config
        self.output_language = output_language
        self._client = None

    def _get_client(self, api_key: str) -> genai.Client:
        """Return the SDK client, built on first use and reused afterwards."""
        if self._client is None:
            self._client = genai.Client(api_key=api_key)
        return self._client

    async def check_availability(self) -> bool:
        available = bool(self.config.resolve_api_key())
        logger.info("ai_availability_checked", backend=self.name, available=available)
        return available

    async def analyze(self, title: str, draft_text: str) -> AnalysisResult:
        api_key = self.config.resolve_api_key()
        if not api_key:
            raise AnalysisFailed(
                "Gemini API key is not configured (set ai.gemini.api_key or GEMINI_API_KEY)",
                backend=self.name,
            )

        prompt = build_single_turn_prompt(title, draft_text, self.output_language)

        logger.info(
            "analysis_request_started",
            backend=self.name,
            model=self.config.model,
            content_length=len(draft_text),
        )

        try:
            client = self._get_client(api_key)
            response = await client.aio.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=GenerateContentConfig(response_mime_type="application/json"),
            )
            text = response.text or "{}"
        except Exception as e:
            # SDK raises its own APIError family plus transport errors
            logger.error(
                "analysis_sdk_error",
                backend=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise AnalysisFailed(f"Gemini request failed: {e}", backend=self.name) from e

        logger.debug("analysis_response_content", backend=self.name, content=text)

        result = parse_analysis_response(text, backend=self.name)

        logger.info(
            "analysis_request_completed",
            backend=self.name,
            optimized_length=len(result.optimized_prompt),
            change_count=len(result.change_log),
        )
        return result
