"""OpenAI-compatible backend implementation.

Works with any API implementing the OpenAI chat completions format
(DashScope/Qwen compatible mode, OpenAI, local servers) using httpx and
JSON mode for structured output.
"""

from typing import Any, Dict, List

import httpx

from promptprinter.llm.client import ModelBackend, parse_analysis_response
from promptprinter.llm.prompts import build_analysis_messages
from promptprinter.models.analysis import AnalysisResult
from promptprinter.models.config import OpenAICompatConfig
from promptprinter.services.exceptions import AnalysisFailed
from promptprinter.utils.logging import get_logger

logger = get_logger(__name__)


class OpenAICompatBackend(ModelBackend):
    """OpenAI-compatible chat completions backend.

    Availability is a lightweight ``GET /models`` probe with a short timeout;
    analysis is a single non-streaming ``POST /chat/completions`` request
    with ``response_format: {type: "json_object"}``.
    """

    name = "openai_compat"

    def __init__(self, config: OpenAICompatConfig, output_language: str):
        """Initialize the backend.

        Args:
            config: Endpoint, key, model and timeouts
            output_language: Language the optimized prompt must be written in
        """
        self.config = config
        self.output_language = output_language
        self.base_url = str(config.endpoint).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    async def check_availability(self) -> bool:
        """Probe the model-listing endpoint.

        Returns:
            True if the endpoint answered with a success status
        """
        url = f"{self.base_url}/models"

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.config.probe_timeout)) as client:
                response = await client.get(url, headers=self._headers())
                available = response.is_success

            logger.info(
                "ai_availability_checked",
                backend=self.name,
                url=url,
                status_code=response.status_code,
                available=available,
            )
            return available

        except Exception as e:
            logger.warning(
                "ai_availability_probe_failed",
                backend=self.name,
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def analyze(self, title: str, draft_text: str) -> AnalysisResult:
        """Request an optimized rewrite of the draft.

        Args:
            title: Prompt title
            draft_text: Prompt content to optimize

        Returns:
            Parsed AnalysisResult

        Raises:
            AnalysisFailed: On network, HTTP, or response-format errors
        """
        messages = build_analysis_messages(title, draft_text, self.output_language)
        payload = {
            "model": self.config.model,
            "messages": messages,
            "response_format": {"type": "json_object"},
        }

        logger.info(
            "analysis_request_started",
            backend=self.name,
            model=self.config.model,
            endpoint=self.base_url,
            content_length=len(draft_text),
        )
        logger.debug("analysis_request_payload", backend=self.name, payload=payload)

        data = await self._post_chat_completion(payload)
        content = self._extract_message_content(data)

        logger.debug("analysis_response_content", backend=self.name, content=content)

        result = parse_analysis_response(content, backend=self.name)

        logger.info(
            "analysis_request_completed",
            backend=self.name,
            optimized_length=len(result.optimized_prompt),
            change_count=len(result.change_log),
        )
        return result

    async def _post_chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST the payload and return the decoded JSON body.

        Raises:
            AnalysisFailed: On timeout, transport or HTTP status errors
        """
        url = f"{self.base_url}/chat/completions"

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.config.request_timeout)) as client:
                response = await client.post(url, json=payload, headers=self._headers())
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                "analysis_http_error",
                backend=self.name,
                status_code=e.response.status_code,
                error=str(e),
            )
            raise AnalysisFailed(
                f"Chat endpoint returned HTTP {e.response.status_code}",
                backend=self.name,
                status_code=e.response.status_code,
            ) from e

        except httpx.TimeoutException as e:
            logger.error("analysis_timeout", backend=self.name, error=str(e))
            raise AnalysisFailed(
                f"Request timed out after {self.config.request_timeout}s",
                backend=self.name,
            ) from e

        except httpx.HTTPError as e:
            logger.error("analysis_network_error", backend=self.name, error=str(e))
            raise AnalysisFailed(f"Network error: {e}", backend=self.name) from e

        except ValueError as e:
            # Body was not JSON at all
            logger.error("analysis_body_not_json", backend=self.name, error=str(e))
            raise AnalysisFailed(f"Chat endpoint returned a non-JSON body: {e}", backend=self.name) from e

    def _extract_message_content(self, data: Dict[str, Any]) -> str:
        """Pull ``choices[0].message.content`` out of the response body.

        Raises:
            AnalysisFailed: If the response structure is not as expected
        """
        try:
            choices: List[Dict[str, Any]] = data["choices"]
            content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AnalysisFailed(
                f"Invalid response structure: {e}",
                backend=self.name,
            ) from e

        if not isinstance(content, str):
            raise AnalysisFailed("Response message content is not text", backend=self.name)

        return content
