"""Gemini ``generateContent`` backend over httpx.

Only the subset of the REST API the runtime needs is mapped: text and
function-call parts in both directions, function declarations, a system
instruction and basic generation config.
"""

from __future__ import annotations

import os
from typing import Any

import httpx
from loguru import logger

from agentweave.runtime.backends.base import ModelMessage, ModelResponse, ResponsePart, ToolDeclaration
from agentweave.runtime.errors import BackendError, ConfigurationError
from agentweave.runtime.models.config import RunConfig
from agentweave.runtime.models.events import FunctionCall
from agentweave.runtime.settings import get_settings

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
TOP_K = 40
TOP_P = 0.95


def _resolve_api_key(api_key: str | None) -> str:
    if api_key:
        return api_key
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    msg = "GEMINI_API_KEY or GOOGLE_API_KEY not set"
    raise ConfigurationError(msg)


# ---------------------------------------------------------------------------
# Payload mapping
# ---------------------------------------------------------------------------


def _message_part(message: ModelMessage) -> dict[str, Any]:
    if message.function_call is not None:
        return {"functionCall": {"name": message.function_call.name, "args": message.function_call.arguments}}
    if message.function_response is not None:
        return {
            "functionResponse": {
                "name": message.function_response.name,
                "response": message.function_response.response,
            }
        }
    return {"text": message.text}


def build_payload(
    messages: list[ModelMessage],
    *,
    tools: list[ToolDeclaration] | None = None,
    system_instruction: str | None = None,
    run_config: RunConfig | None = None,
) -> dict[str, Any]:
    """Build a ``generateContent`` request body."""
    run_config = run_config or RunConfig()

    generation_config: dict[str, Any] = {
        "temperature": run_config.temperature,
        "topK": TOP_K,
        "topP": TOP_P,
    }
    if run_config.max_tokens is not None:
        generation_config["maxOutputTokens"] = run_config.max_tokens

    payload: dict[str, Any] = {
        "contents": [{"role": str(message.role), "parts": [_message_part(message)]} for message in messages],
        "generationConfig": generation_config,
    }
    if system_instruction:
        payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
    if tools:
        payload["tools"] = [{"functionDeclarations": [tool.model_dump() for tool in tools]}]
    return payload


def parse_response(data: dict[str, Any]) -> ModelResponse:
    """Map the first candidate's parts onto a :class:`ModelResponse`."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ModelResponse()

    parts: list[ResponsePart] = []
    for raw in (candidates[0].get("content") or {}).get("parts") or []:
        if "functionCall" in raw:
            call = raw["functionCall"]
            kwargs: dict[str, Any] = {"name": call["name"], "arguments": call.get("args") or {}}
            if call.get("id"):
                kwargs["id"] = call["id"]
            parts.append(ResponsePart(function_call=FunctionCall(**kwargs)))
        elif raw.get("text"):
            parts.append(ResponsePart(text=raw["text"]))
    return ModelResponse(parts=parts)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or response.text
    return response.text


def raise_for_status(response: httpx.Response) -> None:
    """Translate an error response into :class:`BackendError`."""
    if response.is_success:
        return

    status = response.status_code
    detail = _error_message(response)
    if status == 400:
        msg = f"Bad request: {detail}"
    elif status in (401, 403):
        msg = f"Authentication failed: {detail}"
    elif status == 429:
        msg = f"Rate limit exceeded: {detail}"
    elif status >= 500:
        msg = f"Server error ({status}): {detail}"
    else:
        msg = f"API error ({status}): {detail}"
    raise BackendError(msg, status_code=status)


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class GeminiBackend:
    """Synchronous Gemini client implementing ``ModelBackend``.

    Pass ``client`` to reuse (or mock) an ``httpx.Client``; otherwise one is
    created and owned by the backend.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = _resolve_api_key(api_key)
        self.base_url = base_url or settings.gemini_base_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=self.base_url, timeout=self.timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> GeminiBackend:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def generate(
        self,
        *,
        model: str,
        messages: list[ModelMessage],
        tools: list[ToolDeclaration] | None = None,
        system_instruction: str | None = None,
        run_config: RunConfig | None = None,
    ) -> ModelResponse:
        payload = build_payload(messages, tools=tools, system_instruction=system_instruction, run_config=run_config)
        url = f"/v1beta/models/{model}:generateContent"
        timeout = run_config.timeout_seconds if run_config and run_config.timeout_seconds else self.timeout

        logger.debug("Calling Gemini model {} with {} messages", model, len(messages))
        try:
            response = self._client.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=timeout,
            )
        except httpx.HTTPError as exc:
            msg = f"Request to Gemini failed: {exc}"
            raise BackendError(msg) from exc

        raise_for_status(response)
        return parse_response(response.json())
