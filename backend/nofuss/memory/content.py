"""
Memory Content

Encoding, decoding and rendering of the tagged memory content union.
"""
import json
from typing import Any, Iterator

from ..schemas.memory import (
    ChatContent,
    MemoryContent,
    SpecificationContent,
    TextContent,
    memory_content_adapter,
)


def encode_content(content: MemoryContent) -> str:
    return json.dumps(content.model_dump(), sort_keys=True, ensure_ascii=False)


def decode_content(raw: str) -> MemoryContent:
    return memory_content_adapter.validate_json(raw)


def render_content(content: MemoryContent) -> str:
    """Human-readable projection of any content shape."""
    if isinstance(content, TextContent):
        return content.text

    if isinstance(content, ChatContent):
        if content.message is not None:
            return content.message
        return "\n".join(f"{m.role}: {m.content}" for m in content.messages)

    if isinstance(content, SpecificationContent):
        spec = content.summary
        return (
            f"Purpose: {spec.purpose}\n"
            f"Target Audience: {spec.target_audience}\n"
            f"Key Features: {', '.join(spec.key_features)}"
        )

    raise TypeError(f"Unknown memory content: {type(content).__name__}")


def _leaf_strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _leaf_strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from _leaf_strings(item)


def content_text(raw: str) -> str:
    """Every text value of stored content, without keys or the kind tag."""
    data = decode_content(raw).model_dump(exclude={"kind"})
    return "\n".join(_leaf_strings(data))
