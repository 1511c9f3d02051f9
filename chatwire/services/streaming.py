"""
Helpers for streamed chat completions.

The transport delivers server-sent events; these helpers turn the event lines
into ChatCompletionStreamResponse frames and fold the frames back into
complete messages.
"""

from typing import AsyncIterable, AsyncIterator, Dict, Iterable, Iterator, List, Optional

from chatwire.errors import DecodeError
from chatwire.models.chat import (
    ChatCompletionChoice,
    ChatFunctionCall,
    ChatMessage,
    ChatMessageRole,
    FinishReason,
)
from chatwire.models.streaming import (
    ChatCompletionStreamChoice,
    ChatCompletionStreamResponse,
)

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


def _frame_payload(line: str) -> Optional[str]:
    """Return the data of an SSE line, or None for lines that carry no frame."""
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):].strip()
    return payload or None


def iter_sse_frames(lines: Iterable[str]) -> Iterator[ChatCompletionStreamResponse]:
    """
    Decode the frames of a streamed completion from its SSE lines.

    Stops at `data: [DONE]`. Blank lines, comments and non-data fields are
    skipped. A frame that does not decode raises DecodeError.
    """
    for line in lines:
        payload = _frame_payload(line)
        if payload is None:
            continue
        if payload == DONE_MARKER:
            return
        yield ChatCompletionStreamResponse.from_json(payload)


async def aiter_sse_frames(
    lines: AsyncIterable[str],
) -> AsyncIterator[ChatCompletionStreamResponse]:
    """Async variant of iter_sse_frames."""
    async for line in lines:
        payload = _frame_payload(line)
        if payload is None:
            continue
        if payload == DONE_MARKER:
            return
        yield ChatCompletionStreamResponse.from_json(payload)


class _ChoiceState:
    def __init__(self, index: int):
        self.index = index
        self.role: Optional[ChatMessageRole] = None
        self.content: Optional[str] = None
        self.function_name: Optional[str] = None
        self.function_arguments: Optional[str] = None
        self.finish_reason = FinishReason.NULL

    def apply(self, choice: ChatCompletionStreamChoice) -> None:
        delta = choice.delta
        if delta is not None:
            if self.role is None and delta.role is not None:
                self.role = delta.role
            if delta.content is not None:
                self.content = (self.content or "") + delta.content
            if delta.function_call is not None:
                if self.function_name is None and delta.function_call.name:
                    self.function_name = delta.function_call.name
                fragment = delta.function_call.arguments
                if fragment is not None:
                    if not isinstance(fragment, str):
                        raise DecodeError(
                            "function_call arguments fragments must be strings",
                            context=f"choices.{self.index}.delta.function_call.arguments",
                        )
                    self.function_arguments = (self.function_arguments or "") + fragment
        if choice.finish_reason != FinishReason.NULL:
            self.finish_reason = choice.finish_reason

    def message(self) -> ChatMessage:
        function_call = None
        if self.function_name is not None:
            function_call = ChatFunctionCall(
                name=self.function_name,
                arguments=self.function_arguments or "",
            )
        return ChatMessage(
            role=self.role or ChatMessageRole.ASSISTANT,
            content=self.content,
            function_call=function_call,
        )


class StreamAccumulator:
    """
    Folds stream frames into complete messages, one per choice index.

    - role: taken from the first delta that carries one
    - content: fragments are concatenated
    - function_call: name taken once, argument fragments concatenated
    - finish_reason: the last non-null value
    """

    def __init__(self):
        self._choices: Dict[int, _ChoiceState] = {}

    def add(self, frame: ChatCompletionStreamResponse) -> None:
        for choice in frame.choices:
            state = self._choices.get(choice.index)
            if state is None:
                state = self._choices[choice.index] = _ChoiceState(choice.index)
            state.apply(choice)

    def extend(self, frames: Iterable[ChatCompletionStreamResponse]) -> "StreamAccumulator":
        for frame in frames:
            self.add(frame)
        return self

    def messages(self) -> List[ChatMessage]:
        return [self._choices[index].message() for index in sorted(self._choices)]

    def choices(self) -> List[ChatCompletionChoice]:
        return [
            ChatCompletionChoice(
                index=index,
                message=self._choices[index].message(),
                finish_reason=self._choices[index].finish_reason,
            )
            for index in sorted(self._choices)
        ]
