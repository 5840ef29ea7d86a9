"""
Upstream chat-completion client for Chat Proxy.

This module talks to the provider's OpenAI-compatible ``/chat/completions``
endpoint. The tool loop only uses non-streamed calls, so the client returns
the first choice's message as a plain dictionary.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ... import USER_AGENT
from .errors import ChatProxyError, InvalidRequestError, UpstreamError, classify_error
from .turn import Message

logger = logging.getLogger(__name__)


class ChatCompletionRequest(BaseModel):
    """OpenAI-compatible request body."""
    messages: List[Dict[str, Any]]
    model: str
    seed: int = -1
    temperature: float = 0.8
    top_p: float = 1.0
    stream: bool = False
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[str] = None


class UpstreamChatClient:
    """Client for the upstream chat-completion endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 120.0,
        temperature: float = 0.8,
        top_p: float = 1.0,
        seed: int = -1,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the upstream client.

        Args:
            base_url: Base URL of the OpenAI-compatible API
            api_key: Bearer token sent with every request
            timeout: Wall-clock timeout for one request in seconds
            temperature: Sampling temperature
            top_p: Nucleus sampling parameter
            seed: Sampling seed, -1 for provider choice
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.temperature = temperature
        self.top_p = top_p
        self.seed = seed
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Any, api_key: str, **kwargs) -> "UpstreamChatClient":
        """Build a client from ChatProxySettings with an explicit credential."""
        return cls(
            base_url=settings.base_url,
            api_key=api_key,
            timeout=settings.timeout,
            temperature=settings.temperature,
            top_p=settings.top_p,
            seed=settings.seed,
            **kwargs
        )

    async def __aenter__(self) -> "UpstreamChatClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
                "User-Agent": USER_AGENT,
            }
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._client

    def build_request(
        self,
        messages: List[Message],
        model: str,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = "auto"
    ) -> ChatCompletionRequest:
        """Create the request body for one round."""
        return ChatCompletionRequest(
            messages=[message.to_openai() for message in messages],
            model=model,
            seed=self.seed,
            temperature=self.temperature,
            top_p=self.top_p,
            stream=False,
            tools=tools or None,
            tool_choice=tool_choice if tools else None
        )

    async def complete(
        self,
        messages: List[Message],
        model: str,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = "auto"
    ) -> Dict[str, Any]:
        """
        Run one non-streamed chat completion.

        Args:
            messages: Transcript to send
            model: Upstream model id
            tools: OpenAI-style tool schemas to advertise
            tool_choice: Tool choice mode, sent only when tools are given

        Returns:
            The first choice's ``message`` dictionary

        Raises:
            InvalidRequestError: If the request body cannot be built
            UpstreamError: On non-success status, timeout, network failure
                or a malformed response body
        """
        client = self._get_client()

        try:
            request = self.build_request(messages, model, tools, tool_choice)
            response = await client.post(
                "/chat/completions",
                json=request.model_dump(exclude_none=True)
            )
            if response.status_code >= 400:
                detail = response.text[:500] or "No error details"
                logger.error(
                    f"Chat API error: status={response.status_code} detail={detail}"
                )
                raise UpstreamError(
                    f"API responded with status: {response.status_code}",
                    upstream_status=response.status_code,
                    detail=detail
                )
            payload = response.json()
        except ChatProxyError:
            raise
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid chat request: {e.errors()[0]['msg']}", original_error=e)
        except ValueError as e:
            raise UpstreamError("Malformed chat response", detail=str(e), original_error=e)
        except Exception as e:
            error = classify_error(e)
            logger.error(f"Error calling chat API: {error}")
            raise error

        try:
            message = payload["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Malformed chat response", detail=str(payload)[:500], original_error=e)

        if not isinstance(message, dict):
            raise UpstreamError("Malformed chat response", detail=str(message)[:500])

        logger.debug(
            f"Chat API returned finish_reason={payload['choices'][0].get('finish_reason')}"
        )
        return message
