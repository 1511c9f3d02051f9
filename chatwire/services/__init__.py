# Services module
from chatwire.services.function_calling import FunctionExecutor, function_executor
from chatwire.services.openai import OpenAIService
from chatwire.services.streaming import StreamAccumulator, aiter_sse_frames, iter_sse_frames

__all__ = [
    "FunctionExecutor",
    "function_executor",
    "OpenAIService",
    "StreamAccumulator",
    "aiter_sse_frames",
    "iter_sse_frames",
]
