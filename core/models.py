# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of everything that flows through a
# tool call.  None of them is persisted: a ToolInvocation lives for one
# request, the OutboundRequest derived from it is never mutated, and the
# ToolResult is the only thing handed back to the protocol layer.
#
# Flow:
#   ToolInvocation  --(request builder)-->  OutboundRequest
#   OutboundRequest --(HTTP client)------>  raw JSON body
#   raw JSON body   --(dispatcher)-------->  ToolResult
# =============================================================================

from dataclasses import dataclass, field
from typing import Any


# -----------------------------------------------------------------------------
# ToolDefinition - one entry of the static tool catalog
# -----------------------------------------------------------------------------
# The input_schema is a plain JSON-schema object because that is exactly what
# MCP clients receive as `inputSchema` during tool discovery.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described operation exposed to the calling model."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(self.input_schema.get("required", ()))

    @property
    def properties(self) -> dict[str, Any]:
        return self.input_schema.get("properties", {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolInvocation:
    """One incoming "call tool" request."""

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# OutboundRequest - the single HTTP call an invocation maps to
# -----------------------------------------------------------------------------
# `params` is only used for GET (query string), `body` only for POST (JSON).
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OutboundRequest:
    """A fully-resolved call against the OpenReplay API."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    body: dict[str, Any] | None = None


@dataclass(frozen=True)
class TextContent:
    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolResult:
    """The uniform response envelope for every tool call.

    `is_error` is informational (used for logging); results are never
    surfaced as protocol errors.
    """

    content: tuple[TextContent, ...]
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=(TextContent(text=text),), is_error=is_error)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_dict(self) -> dict[str, Any]:
        return {"content": [item.to_dict() for item in self.content]}
