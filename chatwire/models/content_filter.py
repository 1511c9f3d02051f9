"""
Content filter annotations attached to streaming responses.
"""

from typing import Optional

from chatwire.models.base import WireModel


class Hate(WireModel):
    filtered: bool
    severity: Optional[str] = None


class SelfHarm(WireModel):
    filtered: bool
    severity: Optional[str] = None


class Sexual(WireModel):
    filtered: bool
    severity: Optional[str] = None


class Violence(WireModel):
    filtered: bool
    severity: Optional[str] = None


class ContentFilterResults(WireModel):
    """Per-category content filter outcome."""

    hate: Optional[Hate] = None
    self_harm: Optional[SelfHarm] = None
    sexual: Optional[Sexual] = None
    violence: Optional[Violence] = None


class PromptAnnotation(WireModel):
    """Content filter outcome for one prompt."""

    prompt_index: Optional[int] = None
    content_filter_results: Optional[ContentFilterResults] = None
