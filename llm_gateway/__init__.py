from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    call,
    chat,
    complete_text,
    runnable,
    text_runnable,
)

__all__ = [
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "call",
    "chat",
    "complete_text",
    "runnable",
    "text_runnable",
]
