"""Unit tests for the model adapter: response parsing and both backends."""

import json
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from promptprinter.llm.client import parse_analysis_response
from promptprinter.llm.prompts import build_analysis_messages, build_single_turn_prompt
from promptprinter.llm.providers import GeminiBackend, OpenAICompatBackend, create_backend
from promptprinter.models.config import AIBackend, AIConfig, GeminiConfig, OpenAICompatConfig
from promptprinter.services.exceptions import AnalysisFailed


VALID_BODY = json.dumps({"optimizedPrompt": "## Export\n- CSV", "changeLog": ["Added formats"]})


def create_mock_client(method: str, response=None, side_effect=None):
    """Create an httpx.AsyncClient stand-in usable as an async context manager."""
    mock_client = AsyncMock()
    setattr(mock_client, method, AsyncMock(return_value=response, side_effect=side_effect))
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


def create_chat_response(content, status_code=200):
    """Create a chat completions response carrying ``content``."""
    response = Mock()
    response.status_code = status_code
    response.raise_for_status = Mock()
    response.json = Mock(return_value={"choices": [{"message": {"content": content}}]})
    return response


class TestParseAnalysisResponse:
    """Test parsing of raw backend text."""

    def test_parses_camel_case_fields(self):
        result = parse_analysis_response(VALID_BODY)

        assert result.optimized_prompt == "## Export\n- CSV"
        assert result.change_log == ["Added formats"]

    def test_strips_markdown_code_fence(self):
        result = parse_analysis_response(f"```json\n{VALID_BODY}\n```")

        assert result.change_log == ["Added formats"]

    def test_empty_change_log_is_accepted(self):
        result = parse_analysis_response('{"optimizedPrompt": "x", "changeLog": []}')

        assert result.change_log == []

    @pytest.mark.parametrize("text", [
        "not json at all",
        "",
        None,
        "[1, 2, 3]",
        '{"changeLog": []}',
        '{"optimizedPrompt": "x"}',
        '{"optimizedPrompt": "x", "changeLog": "not a list"}',
    ])
    def test_malformed_responses_raise_analysis_failed(self, text):
        with pytest.raises(AnalysisFailed) as exc_info:
            parse_analysis_response(text, backend="test")

        assert exc_info.value.backend == "test"


class TestPrompts:
    """Test the analysis instruction payload."""

    def test_messages_pair_system_and_user(self):
        messages = build_analysis_messages("Orders", "Export orders", "English")

        assert [m["role"] for m in messages] == ["system", "user"]
        assert "English" in messages[0]["content"]
        assert "optimizedPrompt" in messages[0]["content"]
        assert messages[1]["content"] == "Title: Orders\nContent:\nExport orders"

    def test_single_turn_prompt_concatenates(self):
        prompt = build_single_turn_prompt("Orders", "Export orders", "English")
        system, user = build_analysis_messages("Orders", "Export orders", "English")

        assert prompt == system["content"] + "\n\n" + user["content"]


class TestOpenAICompatBackend:
    """Test the OpenAI-compatible HTTP backend."""

    @pytest.fixture
    def backend(self):
        config = OpenAICompatConfig(
            endpoint="https://dashscope.example.com/compatible-mode/v1",
            api_key="sk-test",
            model="qwen-plus",
        )
        return OpenAICompatBackend(config, "Simplified Chinese (简体中文)")

    @pytest.mark.asyncio
    async def test_analyze_success(self, backend):
        """Successful call sends JSON mode and parses the message content."""
        mock_client = create_mock_client("post", response=create_chat_response(VALID_BODY))

        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await backend.analyze("Orders", "Export orders")

        assert result.optimized_prompt == "## Export\n- CSV"

        call = mock_client.post.call_args
        assert call.args[0] == "https://dashscope.example.com/compatible-mode/v1/chat/completions"
        payload = call.kwargs["json"]
        assert payload["model"] == "qwen-plus"
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["messages"][1]["content"] == "Title: Orders\nContent:\nExport orders"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_http_error_status(self, backend):
        """Non-success status surfaces as AnalysisFailed with the code."""
        request = httpx.Request("POST", "https://dashscope.example.com/chat/completions")
        error_response = httpx.Response(401, request=request)
        response = create_chat_response(VALID_BODY, status_code=401)
        response.raise_for_status = Mock(side_effect=httpx.HTTPStatusError(
            "Unauthorized", request=request, response=error_response
        ))
        mock_client = create_mock_client("post", response=response)

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(AnalysisFailed) as exc_info:
                await backend.analyze("Orders", "Export orders")

        assert exc_info.value.status_code == 401
        assert exc_info.value.backend == "openai_compat"

    @pytest.mark.asyncio
    async def test_timeout(self, backend):
        mock_client = create_mock_client("post", side_effect=httpx.ReadTimeout("timed out"))

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(AnalysisFailed, match="timed out"):
                await backend.analyze("Orders", "Export orders")

    @pytest.mark.asyncio
    async def test_network_error(self, backend):
        mock_client = create_mock_client("post", side_effect=httpx.ConnectError("refused"))

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(AnalysisFailed, match="Network error"):
                await backend.analyze("Orders", "Export orders")

    @pytest.mark.asyncio
    async def test_malformed_message_content(self, backend):
        mock_client = create_mock_client("post", response=create_chat_response("Sure! Here you go."))

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(AnalysisFailed, match="malformed JSON"):
                await backend.analyze("Orders", "Export orders")

    @pytest.mark.asyncio
    async def test_unexpected_response_structure(self, backend):
        response = Mock()
        response.raise_for_status = Mock()
        response.json = Mock(return_value={"error": "no choices"})
        mock_client = create_mock_client("post", response=response)

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(AnalysisFailed, match="Invalid response structure"):
                await backend.analyze("Orders", "Export orders")

    @pytest.mark.asyncio
    async def test_availability_check_success(self, backend):
        """The check lists models with the bearer key."""
        mock_client = create_mock_client("get", response=Mock(is_success=True, status_code=200))

        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await backend.check_availability() is True

        call = mock_client.get.call_args
        assert call.args[0] == "https://dashscope.example.com/compatible-mode/v1/models"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_availability_check_auth_failure(self, backend):
        mock_client = create_mock_client("get", response=Mock(is_success=False, status_code=401))

        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await backend.check_availability() is False

    @pytest.mark.asyncio
    async def test_availability_check_never_raises(self, backend):
        mock_client = create_mock_client("get", side_effect=httpx.ConnectTimeout("slow"))

        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await backend.check_availability() is False
            assert await backend.check_availability() is False


class TestGeminiBackend:
    """Test the Gemini SDK backend."""

    @pytest.fixture
    def backend(self):
        return GeminiBackend(GeminiConfig(api_key="gm-test", model="gemini-test"), "English")

    @pytest.fixture
    def mock_genai_client(self):
        with patch("promptprinter.llm.providers.gemini.genai.Client") as client_cls:
            client = client_cls.return_value
            client.aio.models.generate_content = AsyncMock(return_value=Mock(text=VALID_BODY))
            yield client_cls

    @pytest.mark.asyncio
    async def test_availability_is_key_presence(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        assert await GeminiBackend(GeminiConfig(api_key="k"), "English").check_availability() is True
        assert await GeminiBackend(GeminiConfig(), "English").check_availability() is False

    @pytest.mark.asyncio
    async def test_availability_falls_back_to_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        assert await GeminiBackend(GeminiConfig(), "English").check_availability() is True

    @pytest.mark.asyncio
    async def test_analyze_sends_single_turn_json_request(self, backend, mock_genai_client):
        result = await backend.analyze("Orders", "Export orders")

        assert result.change_log == ["Added formats"]
        mock_genai_client.assert_called_once_with(api_key="gm-test")

        call = mock_genai_client.return_value.aio.models.generate_content.call_args
        assert call.kwargs["model"] == "gemini-test"
        assert call.kwargs["contents"] == build_single_turn_prompt("Orders", "Export orders", "English")
        assert call.kwargs["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_client_reused_across_calls(self, backend, mock_genai_client):
        """One SDK client serves every request from the same backend."""
        await backend.analyze("Orders", "Export orders")
        await backend.analyze("Orders", "Export orders again")

        mock_genai_client.assert_called_once_with(api_key="gm-test")
        generate = mock_genai_client.return_value.aio.models.generate_content
        assert generate.await_count == 2

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_analysis_failed(self, backend, mock_genai_client):
        generate = mock_genai_client.return_value.aio.models.generate_content
        generate.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(AnalysisFailed, match="quota exceeded"):
            await backend.analyze("Orders", "Export orders")

    @pytest.mark.asyncio
    async def test_empty_response_text(self, backend, mock_genai_client):
        generate = mock_genai_client.return_value.aio.models.generate_content
        generate.return_value = Mock(text=None)

        with pytest.raises(AnalysisFailed):
            await backend.analyze("Orders", "Export orders")

    @pytest.mark.asyncio
    async def test_missing_key_fails_without_request(self, monkeypatch, mock_genai_client):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        backend = GeminiBackend(GeminiConfig(), "English")

        with pytest.raises(AnalysisFailed, match="API key"):
            await backend.analyze("Orders", "Export orders")

        mock_genai_client.assert_not_called()


class TestCreateBackend:
    """Test backend selection from configuration."""

    def test_default_is_gemini(self):
        assert isinstance(create_backend(AIConfig()), GeminiBackend)

    def test_openai_compat_selected(self):
        config = AIConfig(
            backend=AIBackend.OPENAI_COMPAT,
            openai_compat={"endpoint": "https://x.example.com/v1", "api_key": "k", "model": "m"},
        )

        backend = create_backend(config)

        assert isinstance(backend, OpenAICompatBackend)
        assert backend.base_url == "https://x.example.com/v1"

    def test_override_without_section_raises(self):
        with pytest.raises(ValueError):
            create_backend(AIConfig(), AIBackend.OPENAI_COMPAT)
