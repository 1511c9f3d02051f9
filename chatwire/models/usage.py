from chatwire.models.base import WireModel


class Usage(WireModel):
    """Token usage statistics for a completion request."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
