"""
Canonical text for raw tool results.

Local and remote tools return results of many shapes. ``parse_result``
classifies a raw result into one explicit variant, checked in priority
order, and every variant knows how to render its canonical text:

1. ``TextResult``: the result is a string, used verbatim
2. ``TextContentResult``: a ``content`` sequence whose first item is a
   text block; the block's text is used
3. ``ContentEnvelopeResult``: any other object with a ``content`` field;
   the whole object is serialized
4. ``RecordResult``: any other mapping; a digest of well-known fields,
   or the serialized mapping when none are present
5. ``ScalarResult``: anything else (numbers, booleans, None, sequences,
   dates, bytes); serialized
"""

import json
import logging
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field
from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)


def serialize(value: Any) -> str:
    """Compact JSON serialization used whenever a result has no better text."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _object_fields(value: Any) -> Any:
    if hasattr(value, "__dict__"):
        return {key: item for key, item in vars(value).items() if not key.startswith("_")}
    return str(value)


def to_plain_data(raw: Any) -> Any:
    """Convert models, dataclasses and similar objects to JSON-compatible data.

    Objects pydantic does not know are dumped through their public
    attributes; bytes become base64 text.
    """
    return to_jsonable_python(raw, fallback=_object_fields, bytes_mode="base64")


class TextResult(BaseModel):
    kind: Literal["text"] = "text"
    text: str

    def canonical_text(self) -> str:
        return self.text


class TextContentResult(BaseModel):
    kind: Literal["text_content"] = "text_content"
    text: str

    def canonical_text(self) -> str:
        return self.text


class ContentEnvelopeResult(BaseModel):
    kind: Literal["content_envelope"] = "content_envelope"
    data: Dict[str, Any]

    def canonical_text(self) -> str:
        return serialize(self.data)


class RecordResult(BaseModel):
    """A structured result without a ``content`` field."""

    kind: Literal["record"] = "record"
    data: Dict[str, Any]

    def digest_lines(self) -> List[Tuple[str, Any]]:
        data = self.data
        metadata = data.get("metadata")
        if not isinstance(metadata, Mapping):
            metadata = {}

        # text wins over content unless it is falsy
        fields = [
            ("uuid", data.get("uuid", data.get("id"))),
            ("name", data.get("name")),
            ("content", data.get("text") or data.get("content")),
            ("description", data.get("description")),
            ("metadata_description", metadata.get("description")),
            ("metadata_source", metadata.get("source")),
            ("original_source", data.get("source")),
        ]
        return [(key, value) for key, value in fields if value is not None]

    def canonical_text(self) -> str:
        lines = [f"{key}: {_render_value(value)}" for key, value in self.digest_lines()]
        digest = "\n".join(lines)
        return digest or serialize(self.data)


class ScalarResult(BaseModel):
    kind: Literal["scalar"] = "scalar"
    value: Any = None

    def canonical_text(self) -> str:
        return serialize(self.value)


NormalizedResult = Annotated[
    Union[TextResult, TextContentResult, ContentEnvelopeResult, RecordResult, ScalarResult],
    Field(discriminator="kind"),
]


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return serialize(value)


def _first_text_block(content: Any) -> Optional[str]:
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, Mapping):
        return None
    if first.get("type") == "text" and isinstance(first.get("text"), str):
        return first["text"]
    return None


def parse_result(raw: Any) -> NormalizedResult:
    """Classify a raw tool result into exactly one result variant."""
    if isinstance(raw, str):
        return TextResult(text=raw)

    data = to_plain_data(raw)
    if isinstance(data, dict):
        if "content" in data:
            text = _first_text_block(data["content"])
            if text is not None:
                return TextContentResult(text=text)
            return ContentEnvelopeResult(data=data)
        return RecordResult(data=data)

    return ScalarResult(value=data)


def canonical_text(raw: Any) -> str:
    """Canonical text of a raw tool result."""
    result = parse_result(raw)
    logger.debug(f"Normalized {type(raw).__name__} result as '{result.kind}'")
    return result.canonical_text()
