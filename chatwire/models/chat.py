"""
Pydantic models for the OpenAI Chat Completions wire format.
"""

import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    BeforeValidator,
    Field,
    JsonValue,
    PlainSerializer,
    StrictStr,
    ValidationInfo,
    model_serializer,
    model_validator,
)

from chatwire.errors import InvariantViolation
from chatwire.models.base import EpochDatetime, WireModel, from_the_wire
from chatwire.models.usage import Usage


# Allowed characters for a message author name
NAME_PATTERN = re.compile(r"[A-Za-z0-9_]{1,64}")


class ChatMessageRole(str, Enum):
    """Role of a message author."""

    # Written by the end user, or by a developer as an instruction
    USER = "user"
    # Sets the behavior of the assistant
    SYSTEM = "system"
    # Prior responses, or developer-written examples of desired behavior
    ASSISTANT = "assistant"
    # Result of a function call
    FUNCTION = "function"

    def __str__(self) -> str:
        return self.value


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    # Complete message, or terminated by one of the stop sequences
    STOP = "stop"
    # Cut off by max_tokens or the context length
    LENGTH = "length"
    # The model decided to call a function
    FUNCTION_CALL = "function_call"
    # Omitted by the content filters
    CONTENT_FILTER = "content_filter"
    # Still in progress or incomplete
    NULL = "null"

    def __str__(self) -> str:
        return self.value


def _null_finish_reason(value: Any) -> Any:
    # In-progress streaming frames carry a JSON null
    return FinishReason.NULL if value is None else value


def _emit_finish_reason(value: FinishReason) -> Optional[str]:
    return None if value is FinishReason.NULL else value.value


# NULL travels as a JSON null in both directions
FinishReasonField = Annotated[
    FinishReason,
    BeforeValidator(_null_finish_reason),
    PlainSerializer(_emit_finish_reason, return_type=Optional[str], when_used="json"),
]

# Either a single stop sequence or a list of them
StopSequences = Union[StrictStr, List[StrictStr]]

# "none" / "auto", or a structured directive such as {"name": "my_function"}
FunctionCallDirective = Union[StrictStr, JsonValue]


class ChatFunctionCall(WireModel):
    """
    Name and arguments of a function the model wants called.

    The arguments are generated by the model, usually as JSON text. They are
    not guaranteed to be valid JSON and may hallucinate parameters, so they
    are kept as an opaque value here and decoded by the dispatcher.
    """

    name: str
    arguments: JsonValue


class ChatFunction(WireModel):
    """Function the model may generate JSON inputs for."""

    name: str
    description: Optional[str] = None
    # JSON Schema object; {"type": "object", "properties": {}} for no parameters
    parameters: JsonValue


class ChatMessage(WireModel):
    """A chat message in a conversation."""

    role: ChatMessageRole
    # Required for every message except assistant replies carrying a function_call
    content: Optional[str] = None
    # Required for function messages: the name of the function whose result is in content
    name: Optional[str] = None
    function_call: Optional[ChatFunctionCall] = None
    # Local token accounting, never sent over the wire
    tokens: int = Field(default=0, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _ignore_wire_tokens(cls, data: Any, info: ValidationInfo) -> Any:
        if from_the_wire(info) and isinstance(data, dict) and "tokens" in data:
            data = {k: v for k, v in data.items() if k != "tokens"}
        return data

    @model_serializer(mode="wrap")
    def _emit_null_content(self, handler):
        data = handler(self)
        # content is always present on the wire, as null when absent
        data.setdefault("content", None)
        return data

    def check_invariants(self) -> None:
        super().check_invariants()
        if self.content is None and not (
            self.role == ChatMessageRole.ASSISTANT and self.function_call is not None
        ):
            raise InvariantViolation(
                f"'{self.role}' message requires content unless it is an "
                "assistant message with a function_call"
            )
        if self.role == ChatMessageRole.FUNCTION and self.name is None:
            raise InvariantViolation("'function' message requires a name")
        if self.name is not None and not NAME_PATTERN.fullmatch(self.name):
            raise InvariantViolation(
                f"Invalid message name '{self.name}': expected 1-64 characters "
                "from a-z, A-Z, 0-9 and underscore"
            )


class ChatCompletionRequest(WireModel):
    """Request body for the chat completions API."""

    model: str
    messages: List[ChatMessage]
    max_tokens: Optional[int] = None
    # Sampling temperature between 0 and 2
    temperature: float = 1.0
    # Nucleus sampling mass; alter this or temperature, not both
    top_p: float = 1.0
    num_completions: int = Field(default=1, alias="n")
    stream: bool = False
    # Up to 4 sequences where generation stops
    stop: Optional[StopSequences] = None
    # Between -2.0 and 2.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    logit_bias: Optional[Dict[str, float]] = None
    user: Optional[str] = None
    functions: Optional[List[ChatFunction]] = None
    function_call: Optional[FunctionCallDirective] = None


class ChatCompletionChoice(WireModel):
    """Choice in a chat completion response."""

    index: int
    message: ChatMessage
    finish_reason: FinishReasonField


class ChatCompletionResponse(WireModel):
    """Response body for a non-streaming chat completion."""

    id: str
    # Always "chat.completion"
    object: str
    created: EpochDatetime
    model: str
    # More than one when n is greater than 1
    choices: List[ChatCompletionChoice]
    usage: Usage
