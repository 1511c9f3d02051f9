"""
Pydantic models for the chat completion wire format.

This package contains every entity exchanged with the chat completions API,
together with the rules that map them to and from JSON.
"""

from chatwire.models.base import *
from chatwire.models.usage import *
from chatwire.models.chat import *
from chatwire.models.content_filter import *
from chatwire.models.streaming import *
from chatwire.models.registry import *
