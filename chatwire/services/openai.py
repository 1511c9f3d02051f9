"""
OpenAI service for making chat completion requests.

A thin transport over httpx: it puts a ChatCompletionRequest on the wire and
decodes what comes back. Retries and rate limiting are left to the caller.
"""

from typing import AsyncIterator, Dict, Optional

import httpx
import structlog

from chatwire.config import settings
from chatwire.models.chat import ChatCompletionRequest, ChatCompletionResponse
from chatwire.models.streaming import ChatCompletionStreamResponse
from chatwire.services.streaming import aiter_sse_frames

# Get a logger for this module
log = structlog.get_logger()

CHAT_COMPLETIONS_ENDPOINT = "/v1/chat/completions"


class OpenAIService:
    """Service for interacting with the chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT if timeout is None else timeout
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        """
        Get the required headers for API requests.

        Returns:
            Dictionary of HTTP headers
        """
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._get_headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def create_chat_completion(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        """
        Create a chat completion.

        Args:
            request: The request to send; `stream` is sent as false

        Returns:
            The decoded response

        Raises:
            httpx.HTTPStatusError: The API answered with an error status
            DecodeError: The response body does not match the response shape
        """
        payload = request.model_copy(update={"stream": False}).to_wire()
        log.debug("Creating chat completion", model=request.model)

        async with self._client() as client:
            response = await client.post(CHAT_COMPLETIONS_ENDPOINT, json=payload)
            response.raise_for_status()

        return ChatCompletionResponse.from_json(response.content)

    async def stream_chat_completion(
        self, request: ChatCompletionRequest
    ) -> AsyncIterator[ChatCompletionStreamResponse]:
        """
        Create a streamed chat completion.

        Args:
            request: The request to send; `stream` is sent as true

        Yields:
            One decoded frame per server-sent event, until `[DONE]`
        """
        payload = request.model_copy(update={"stream": True}).to_wire()
        log.debug("Streaming chat completion", model=request.model)

        async with self._client() as client:
            async with client.stream(
                "POST", CHAT_COMPLETIONS_ENDPOINT, json=payload
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    response.raise_for_status()

                async for frame in aiter_sse_frames(response.aiter_lines()):
                    yield frame
