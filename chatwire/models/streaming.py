"""
Pydantic models for a single frame of a streamed chat completion.

A frame only carries what changed since the previous one, so every delta
field is optional. Combining frames is done by StreamAccumulator in
chatwire.services.streaming.
"""

from typing import List, Optional

from pydantic import JsonValue

from chatwire.models.base import EpochDatetime, WireModel
from chatwire.models.chat import ChatMessageRole, FinishReasonField
from chatwire.models.content_filter import ContentFilterResults, PromptAnnotation


class ChatFunctionCallDelta(WireModel):
    """Fragment of a function call; the name only arrives on the first fragment."""

    name: Optional[str] = None
    arguments: Optional[JsonValue] = None


class ChatCompletionStreamChoiceDelta(WireModel):
    """Partial message."""

    role: Optional[ChatMessageRole] = None
    content: Optional[str] = None
    function_call: Optional[ChatFunctionCallDelta] = None


class ChatCompletionStreamChoice(WireModel):
    """Choice in a streamed chat completion frame."""

    index: int
    delta: Optional[ChatCompletionStreamChoiceDelta] = None
    finish_reason: FinishReasonField
    content_filter_results: Optional[ContentFilterResults] = None


class ChatCompletionStreamResponse(WireModel):
    """One frame of a streamed chat completion."""

    id: str
    # Always "chat.completion.chunk"
    object: str
    created: EpochDatetime
    model: str
    choices: List[ChatCompletionStreamChoice]
    prompt_annotations: Optional[List[PromptAnnotation]] = None
