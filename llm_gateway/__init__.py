from __future__ import annotations  # Re-export llm_gateway public API

from .gateway import GenerationFailure, GenerationGateway, RateLimited
from .llm_gateway import HttpClient, HttpResponse, LlmGatewayError, complete, http_capability

__all__ = [
    "GenerationFailure",
    "GenerationGateway",
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "RateLimited",
    "complete",
    "http_capability",
]
