"""
Utility for validating Chat Completion request bodies.
"""

import json
from typing import Dict, Any, Tuple, Union

from chatwire.errors import ChatWireError
from chatwire.models.chat import ChatCompletionRequest


def validate_chat_request(
    request_json: str,
) -> Tuple[bool, Union[ChatCompletionRequest, str]]:
    """
    Validate that a JSON string is a well-formed ChatCompletionRequest.

    The request is decoded and its invariants checked, so a request that
    passes can be sent as is.

    Args:
        request_json: JSON string containing a chat completion request

    Returns:
        A tuple containing:
        - bool: True if validation was successful, False otherwise
        - Union[ChatCompletionRequest, str]: Either the parsed model or an error message
    """
    try:
        request_data = json.loads(request_json)
    except json.JSONDecodeError as e:
        return False, f"Invalid JSON format: {str(e)}"

    return validate_chat_request_dict(request_data)


def validate_chat_request_dict(
    request_data: Dict[str, Any],
) -> Tuple[bool, Union[ChatCompletionRequest, str]]:
    """
    Validate that a dictionary is a well-formed ChatCompletionRequest.

    Args:
        request_data: Dictionary containing a chat completion request

    Returns:
        A tuple containing:
        - bool: True if validation was successful, False otherwise
        - Union[ChatCompletionRequest, str]: Either the parsed model or an error message
    """
    try:
        model = ChatCompletionRequest.from_wire(request_data)
        model.check_invariants()
        return True, model
    except ChatWireError as e:
        return False, f"Validation error: {str(e)}"
