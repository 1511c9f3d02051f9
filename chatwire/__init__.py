"""
chatwire - message and protocol layer for the OpenAI Chat Completions API

Wire-exact request and response models, plus a registry that advertises
Python functions to the model and runs the calls it makes.
"""
from chatwire.errors import (
    ChatWireError,
    DecodeError,
    FunctionNotFoundError,
    InvariantViolation,
)
from chatwire.models.chat import (
    ChatCompletionChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatFunction,
    ChatFunctionCall,
    ChatMessage,
    ChatMessageRole,
    FinishReason,
)
from chatwire.models.content_filter import (
    ContentFilterResults,
    Hate,
    PromptAnnotation,
    SelfHarm,
    Sexual,
    Violence,
)
from chatwire.models.streaming import (
    ChatCompletionStreamChoice,
    ChatCompletionStreamChoiceDelta,
    ChatCompletionStreamResponse,
    ChatFunctionCallDelta,
)
from chatwire.models.usage import Usage
from chatwire.services.function_calling import FunctionExecutor, function_executor
from chatwire.services.openai import OpenAIService
from chatwire.services.streaming import StreamAccumulator, aiter_sse_frames, iter_sse_frames

__version__ = "0.1.0"
