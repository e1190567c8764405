"""
LLM completion adapter using AWS Bedrock.

The smart search pipeline only needs "prompt in, text out". Anything that
implements CompletionAdapter can be plugged into SmartSearchService; tests use
fakes, production uses BedrockCompletionAdapter over the Converse API.
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from smartsearch.config.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

BEDROCK_RUNTIME = "bedrock-runtime"


class CompletionError(Exception):
    """The completion backend failed or returned nothing usable."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)


@runtime_checkable
class CompletionAdapter(Protocol):
    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        ...


def create_bedrock_client(region_name: str) -> Any:
    """Bedrock runtime client from the default credential chain."""
    session = boto3.Session(region_name=region_name)
    return session.client(
        BEDROCK_RUNTIME,
        config=Config(retries={"max_attempts": 2, "mode": "standard"}),
    )


class BedrockCompletionAdapter:
    """CompletionAdapter over the Bedrock Converse API."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or get_settings()
        self.region = self.settings.aws_region
        self.model_id = self.settings.bedrock_model_id
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = create_bedrock_client(self.region)
            logger.info("Bedrock client initialized", model_id=self.model_id, region=self.region)
        return self._client

    def _build_inference_config(self) -> Dict[str, Any]:
        """Build inference configuration suitable for Bedrock Converse API."""
        config: Dict[str, Any] = {}
        if self.settings.max_tokens:
            config["maxTokens"] = int(self.settings.max_tokens)
        if self.settings.temperature is not None:
            config["temperature"] = float(self.settings.temperature)
        return config

    def _build_messages(self, prompt: str, system_prompt: Optional[str]) -> List[Dict[str, Any]]:
        # Some Bedrock models reject the system field, so it is prepended instead
        if system_prompt:
            prompt = f"{system_prompt}\n\n{prompt}"
        return [{"role": "user", "content": [{"text": prompt}]}]

    @staticmethod
    def _extract_text(response: Dict[str, Any]) -> str:
        """Extract textual content from Bedrock Converse response."""
        if not response:
            return ""

        output = response.get("output") or {}
        message = output.get("message") or {}
        content = message.get("content") or []

        text_chunks = [
            part["text"] for part in content
            if isinstance(part, dict) and part.get("text")
        ]
        return "\n".join(text_chunks).strip()

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        if not prompt:
            raise ValueError("prompt must not be empty")

        request_payload: Dict[str, Any] = {
            "modelId": self.model_id,
            "messages": self._build_messages(prompt, system_prompt),
        }
        inference_config = self._build_inference_config()
        if inference_config:
            request_payload["inferenceConfig"] = inference_config

        loop = asyncio.get_running_loop()

        def _do_call() -> Dict[str, Any]:
            return self.client.converse(**request_payload)

        try:
            response = await loop.run_in_executor(None, _do_call)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error("Bedrock API error", error_code=error_code, message=error_message)
            raise CompletionError(f"Bedrock API error: {error_message}", error_code) from e
        except BotoCoreError as e:
            logger.error("AWS connection error", error=str(e))
            raise CompletionError(f"AWS connection error: {e}") from e

        text = self._extract_text(response)
        if not text:
            logger.warning("Empty response from Bedrock", model_id=self.model_id)
            raise CompletionError("Empty response from Bedrock")

        logger.debug("Bedrock converse call succeeded", model_id=self.model_id, length=len(text))
        return text
