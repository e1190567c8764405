"""
Tests for the Bedrock completion adapter.

The boto3 client is always a MagicMock; nothing here talks to AWS.
"""

import pytest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError, EndpointConnectionError

from smartsearch.config.settings import Settings
from smartsearch.services.llm_service import (
    BedrockCompletionAdapter,
    CompletionAdapter,
    CompletionError,
)


def _converse_response(*texts):
    return {"output": {"message": {"role": "assistant", "content": [{"text": t} for t in texts]}}}


@pytest.fixture
def client():
    client = MagicMock()
    client.converse.return_value = _converse_response('{"filters": {}}')
    return client


@pytest.fixture
def adapter(client):
    settings = Settings(bedrock_model_id="test-model", max_tokens=256, temperature=0.0)
    return BedrockCompletionAdapter(settings=settings, client=client)


class TestBedrockCompletionAdapter:

    def test_satisfies_protocol(self, adapter):
        assert isinstance(adapter, CompletionAdapter)

    @pytest.mark.asyncio
    async def test_converse_payload(self, adapter, client):
        result = await adapter.complete("느린 쿼리", system_prompt="SYSTEM")

        assert result == '{"filters": {}}'
        kwargs = client.converse.call_args.kwargs
        assert kwargs["modelId"] == "test-model"
        assert kwargs["messages"] == [
            {"role": "user", "content": [{"text": "SYSTEM\n\n느린 쿼리"}]},
        ]
        assert kwargs["inferenceConfig"] == {"maxTokens": 256, "temperature": 0.0}

    @pytest.mark.asyncio
    async def test_prompt_without_system_prompt(self, adapter, client):
        await adapter.complete("느린 쿼리")
        assert client.converse.call_args.kwargs["messages"][0]["content"] == [{"text": "느린 쿼리"}]

    @pytest.mark.asyncio
    async def test_joins_text_chunks(self, adapter, client):
        client.converse.return_value = _converse_response("first", "second")
        assert await adapter.complete("q") == "first\nsecond"

    @pytest.mark.asyncio
    async def test_empty_prompt_rejected(self, adapter, client):
        with pytest.raises(ValueError):
            await adapter.complete("")
        client.converse.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_response_raises(self, adapter, client):
        client.converse.return_value = {"output": {"message": {"content": []}}}
        with pytest.raises(CompletionError, match="Empty response"):
            await adapter.complete("q")

    @pytest.mark.asyncio
    async def test_client_error_is_wrapped(self, adapter, client):
        client.converse.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"}},
            "Converse",
        )
        with pytest.raises(CompletionError) as exc_info:
            await adapter.complete("q")
        assert exc_info.value.error_code == "ThrottlingException"

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self, adapter, client):
        client.converse.side_effect = EndpointConnectionError(endpoint_url="https://bedrock.example")
        with pytest.raises(CompletionError, match="AWS connection error"):
            await adapter.complete("q")

    def test_extract_text_handles_missing_parts(self):
        assert BedrockCompletionAdapter._extract_text({}) == ""
        assert BedrockCompletionAdapter._extract_text({"output": None}) == ""
        assert BedrockCompletionAdapter._extract_text(
            {"output": {"message": {"content": [{"image": {}}, {"text": " ok "}]}}}
        ) == "ok"

    def test_client_is_created_lazily(self):
        settings = Settings(aws_region="eu-west-1")
        with patch("smartsearch.services.llm_service.create_bedrock_client") as create:
            adapter = BedrockCompletionAdapter(settings=settings)
            create.assert_not_called()
            assert adapter.client is create.return_value
            assert adapter.client is create.return_value
        create.assert_called_once_with("eu-west-1")
