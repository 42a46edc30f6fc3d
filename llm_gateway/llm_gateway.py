from __future__ import annotations  # Chat-completions gateway with schema validation

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from langchain_core.messages import BaseMessage
from langchain_core.runnables import RunnableLambda
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_ROLE_NAMES = {"human": "user", "ai": "assistant"}


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> HttpResponse: ...


class LlmGatewayError(RuntimeError):  # Transport, status or validation failure
    pass


T = TypeVar("T", bound=BaseModel)


def call(task: str, schema: Type[T], *, cfg: LlmRoute, client: Optional[HttpClient] = None) -> T:  # Single-prompt helper
    return chat([{"role": "user", "content": task}], schema, cfg=cfg, client=client)


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
) -> T:  # Send messages and validate the reply against ``schema``
    conversation = _normalize_messages(messages)
    if cfg.enforce_json:
        schema_json = json.dumps(schema.model_json_schema(), indent=2)
        conversation.insert(0, {"role": "system", "content": "Reply with a single JSON object matching this schema:\n" + schema_json})
    attempts = cfg.max_retries + 1
    last_error: Optional[Exception] = None
    for attempt in range(attempts):
        outgoing = list(conversation)
        if last_error is not None:
            outgoing.append({"role": "system", "content": _retry_hint(last_error)})
        logger.info("LLM request route=%s model=%s attempt=%d/%d", cfg.name, cfg.model, attempt + 1, attempts)
        content = _send(outgoing, cfg=cfg, client=client, json_mode=True)
        try:
            return _validate(schema, content)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("LLM output failed validation route=%s: %s", cfg.name, exc)
            last_error = exc
    raise LlmGatewayError("LLM output validation failed") from last_error


def complete_text(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
) -> str:  # Free-form completion without schema enforcement
    logger.info("LLM text request route=%s model=%s", cfg.name, cfg.model)
    content = _send(_normalize_messages(messages), cfg=cfg, client=client, json_mode=False).strip()
    if not content:
        raise LlmGatewayError("LLM returned an empty completion")
    return content


def runnable(route: LlmRoute, schema: Type[T]) -> RunnableLambda:  # Structured step for prompt | llm chains
    def _invoke(payload: Any) -> T:
        return chat(_coerce_messages(payload), schema, cfg=route)

    return RunnableLambda(_invoke)


def text_runnable(route: LlmRoute) -> RunnableLambda:  # Plain-text step for prompt | llm chains
    def _invoke(payload: Any) -> str:
        return complete_text(_coerce_messages(payload), cfg=route)

    return RunnableLambda(_invoke)


def _send(messages: List[Dict[str, str]], *, cfg: LlmRoute, client: Optional[HttpClient], json_mode: bool) -> str:
    payload: Dict[str, Any] = {
        "model": cfg.model,
        "messages": messages,
        "temperature": cfg.temperature,
        "max_tokens": cfg.max_tokens,
    }
    if json_mode and cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}
    url = f"{cfg.base_url}{cfg.endpoint}"
    headers = _headers(cfg)
    try:
        if client is not None:
            response = client.post(url, json=payload, headers=headers, timeout=cfg.timeout_s)
            data = _decode(response)
        else:
            with httpx.Client(timeout=cfg.timeout_s) as http_client:
                response = http_client.post(url, json=payload, headers=headers)
                data = _decode(response)
    except httpx.HTTPError as exc:
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM transport failed") from exc
    return _extract_content(data)


def _decode(response: HttpResponse) -> Any:
    if response.status_code >= 400:
        logger.error("LLM error status: %s", response.status_code)
        raise LlmGatewayError(f"LLM returned status {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise LlmGatewayError("LLM payload was not JSON") from exc


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            logger.warning("API key env %s is not set for route %s", cfg.api_key_env, cfg.name)
    headers.update(cfg.extra_headers)
    return headers


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    normalized: List[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _extract_content(data: Any) -> str:
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse the first JSON object found in the reply
    text = _strip_code_fences(content)
    match = _JSON_OBJECT.search(text)
    return schema.model_validate_json(match.group(0) if match else text)


def _strip_code_fences(content: str) -> str:
    text = content.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _retry_hint(error: Exception) -> str:
    reason = str(error).splitlines()[0].strip() if str(error) else ""
    if len(reason) > 200:
        reason = reason[:197] + "..."
    hint = "The previous reply failed validation."
    if reason:
        hint += f" Reason: {reason}."
    return hint + " Return a single JSON object that matches the schema."


def _coerce_messages(payload: Any) -> List[Dict[str, str]]:  # Convert prompt values into role/content dicts
    if hasattr(payload, "to_messages"):
        payload = payload.to_messages()
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, BaseMessage):
        return [_message_dict(payload)]
    if isinstance(payload, (list, tuple)):
        if all(isinstance(item, dict) for item in payload):
            return list(payload)
        if all(isinstance(item, BaseMessage) for item in payload):
            return [_message_dict(item) for item in payload]
    raise TypeError("Unsupported message payload for LLM runnable")


def _message_dict(message: BaseMessage) -> Dict[str, str]:
    content = message.content
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"role": _ROLE_NAMES.get(message.type, message.type), "content": content}
