"""Narrow interface over the generative-AI API.

Every AI feature in the service goes through these functions: plain text
generation, strict JSON-schema generation, web search with citations,
streamed chat, audio transcription and speech synthesis.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from openai import OpenAI
from pydantic import BaseModel

from reggenie.config.settings import settings
from reggenie.database.local_store import get_local_storage

logger = logging.getLogger(__name__)

USER_KEY_SETTING = "openai_api_key"

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


@dataclass
class GroundedText:
    """Web-search answer plus the sources it cited."""
    text: str
    sources: List[Dict[str, str]] = field(default_factory=list)


def resolve_api_key() -> str:
    key = settings.openai_api_key or get_local_storage().get_item(USER_KEY_SETTING)
    if not key:
        raise ValueError("OpenAI API key not configured")
    return key


def get_openai_client() -> OpenAI:
    return OpenAI(api_key=resolve_api_key())


def strict_schema(model: Type[BaseModel]) -> dict:
    """JSON schema for structured outputs: closed objects, all keys required."""

    def tighten(node: Any) -> None:
        if isinstance(node, dict):
            node.pop("default", None)
            if node.get("type") == "object" and "properties" in node:
                node["additionalProperties"] = False
                node["required"] = list(node["properties"].keys())
            for value in node.values():
                tighten(value)
        elif isinstance(node, list):
            for item in node:
                tighten(item)

    schema = model.model_json_schema()
    tighten(schema)
    return schema


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def generate_text(prompt: str, system: Optional[str] = None, temperature: float = 0.2) -> str:
    client = get_openai_client()

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    response = client.chat.completions.create(
        model=settings.chat_model,
        messages=messages,
        temperature=temperature,
    )

    text = response.choices[0].message.content
    if not text:
        raise ValueError("No response from AI")
    return text.strip()


def generate_structured(
    prompt: str,
    result_model: Type[T],
    name: str,
    system: Optional[str] = None,
    temperature: float = 0.1,
) -> T:
    client = get_openai_client()

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    response = client.chat.completions.create(
        model=settings.structured_model,
        messages=messages,
        response_format={
            "type": "json_schema",
            "json_schema": {
                "name": name,
                "strict": True,
                "schema": strict_schema(result_model),
            },
        },
        temperature=temperature,
    )

    raw = response.choices[0].message.content
    if not raw:
        raise ValueError("No response from AI")

    result = result_model.model_validate_json(strip_code_fences(raw))
    logger.debug("Structured response '%s' parsed", name)
    return result


def search_web(prompt: str) -> GroundedText:
    """Run a prompt with the web-search tool and collect cited sources."""
    client = get_openai_client()

    response = client.responses.create(
        model=settings.search_model,
        tools=[{"type": "web_search_preview"}],
        input=prompt,
    )

    sources: List[Dict[str, str]] = []
    seen = set()
    for item in response.output or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in item.content or []:
            for annotation in getattr(content, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                if annotation.url in seen:
                    continue
                seen.add(annotation.url)
                sources.append({"uri": annotation.url, "title": annotation.title or ""})

    logger.info("Web search returned %d cited sources", len(sources))
    return GroundedText(text=response.output_text or "", sources=sources)


def stream_chat(messages: List[Dict[str, str]]) -> Iterator[str]:
    """Yield non-empty content deltas of a streamed chat completion."""
    client = get_openai_client()

    stream = client.chat.completions.create(
        model=settings.chat_model,
        messages=messages,
        stream=True,
    )

    for chunk in stream:
        if not chunk.choices:
            continue
        content = chunk.choices[0].delta.content
        if content:
            yield content


def transcribe_audio(data: bytes, filename: str) -> str:
    client = get_openai_client()

    transcription = client.audio.transcriptions.create(
        model=settings.transcription_model,
        file=(filename, data),
    )
    return transcription.text


def synthesize_speech(text: str, voice: str = "nova") -> bytes:
    client = get_openai_client()

    response = client.audio.speech.create(
        model=settings.speech_model,
        voice=voice,
        input=text,
    )
    return response.content
