"""chat-proxy: HTTP front for the tool-augmented chat loop.

POST /api/chat takes ``{messages, model}`` (plus an optional ``apiKey`` query
parameter) and answers with a ``text/event-stream`` of tool status updates,
the final content, and a ``[DONE]`` sentinel.
"""

import logging
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .. import VERSION
from ..config.settings import ChatProxySettings, get_settings
from ..core.chat_service import ChatService
from ..core.client.errors import ChatProxyError, InvalidRequestError, UpstreamError
from ..core.function_calling.response_streamer import encode_sse, stream_events

logger = logging.getLogger(__name__)

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def _error_response(error: ChatProxyError) -> JSONResponse:
    if isinstance(error, UpstreamError):
        body = {"error": "Failed to process chat request", "detail": error.detail or error.message}
    else:
        body = {"error": error.message}
    return JSONResponse(body, status_code=error.status or 500)


def create_app(
    settings: Optional[ChatProxySettings] = None,
    service: Optional[ChatService] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings, loaded from the environment when omitted
        service: Chat service, built from the settings when omitted
    """
    settings = settings or get_settings()
    app = FastAPI(title="chat-proxy", version=VERSION)
    app.state.chat_service = service or ChatService(settings)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/chat")
    async def chat(request: Request, apiKey: Optional[str] = None) -> Any:
        chat_service: ChatService = request.app.state.chat_service
        try:
            try:
                body = await request.json()
            except ValueError:
                raise InvalidRequestError("Request body must be JSON")
            if not isinstance(body, dict):
                raise InvalidRequestError("Messages array is required", field="messages")

            outcome = await chat_service.respond(
                body.get("messages"),
                model=body.get("model"),
                api_key=apiKey
            )
        except ChatProxyError as e:
            logger.error(f"Chat API error: {e}")
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Unhandled error in chat request: {e}")
            return JSONResponse(
                {"error": "Failed to process chat request", "detail": str(e) or e.__class__.__name__},
                status_code=500
            )

        async def event_stream() -> AsyncIterator[str]:
            for event in stream_events(outcome):
                yield encode_sse(event)

        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers=_SSE_HEADERS
        )

    return app
