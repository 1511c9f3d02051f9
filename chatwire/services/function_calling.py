import inspect
import json
from typing import Any, Callable, List, Optional, Tuple, get_type_hints

import structlog
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_json

from chatwire.errors import DecodeError, FunctionNotFoundError
from chatwire.models.chat import (
    ChatFunction,
    ChatFunctionCall,
    ChatMessage,
    ChatMessageRole,
)
from chatwire.models.registry import FunctionRegistry, RegistryItem

# Get a logger for this module
log = structlog.get_logger()


class FunctionExecutor:
    """
    Advertises caller-defined functions to the model and runs the calls it makes.

    Each function is registered with an input type. The input type's JSON
    Schema becomes the function's `parameters`, and the model-generated
    arguments are validated against that type before the callback runs.
    Any type pydantic can build a TypeAdapter for works: models, dataclasses,
    TypedDicts.
    """

    def __init__(self):
        self.registry = FunctionRegistry()

    def register(
        self,
        name: str,
        description: Optional[str],
        input_type: Any,
        callback: Callable[[Any], Any],
    ) -> ChatFunction:
        """
        Register a function under `name`.

        Registering an existing name replaces the previous entry.

        Args:
            name: The name the model will call the function by
            description: What the function does, used by the model to pick it
            input_type: Type the arguments are decoded into
            callback: Called with the decoded arguments; its return value must
                be JSON serializable

        Returns:
            The ChatFunction advertised for this entry
        """
        adapter = TypeAdapter(input_type)
        definition = ChatFunction(
            name=name,
            description=description,
            parameters=adapter.json_schema(),
        )

        if name in self.registry.registry:
            log.debug(f"Replacing registered function: {name}")

        self.registry.registry[name] = RegistryItem(
            definition=definition,
            decode=adapter.validate_json,
            callback=callback,
        )
        log.debug(f"Registered function: {name}")
        return definition

    def function(self, name: Optional[str] = None, description: Optional[str] = None):
        """
        Decorator to register a function.

        The input type is taken from the annotation of the function's first
        parameter, the name defaults to the function's own name and the
        description to its docstring.
        """

        def decorator(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
            parameters = list(inspect.signature(func).parameters)
            if not parameters:
                raise TypeError(f"{func.__name__} must accept one argument")
            hints = get_type_hints(func)
            if parameters[0] not in hints:
                raise TypeError(
                    f"{func.__name__} must annotate its '{parameters[0]}' parameter"
                )
            self.register(
                name or func.__name__,
                description if description is not None else inspect.getdoc(func),
                hints[parameters[0]],
                func,
            )
            return func

        return decorator

    def functions(self) -> List[ChatFunction]:
        """All registered function definitions, ready for a request's `functions`."""
        return self.registry.get_all_definitions()

    def resolve(self, name: str) -> RegistryItem:
        """
        Find the registry item for a function name.

        The model sometimes namespaces the name ("functions.search"), so the
        part after the first dot is tried when the literal name is unknown.
        """
        item = self.registry.get_item(name)
        if item is None and "." in name:
            item = self.registry.get_item(name.split(".", 1)[1])
        if item is None:
            raise FunctionNotFoundError(name)
        return item

    def _prepare(self, call: ChatFunctionCall) -> Tuple[RegistryItem, Any]:
        item = self.resolve(call.name)

        arguments = call.arguments
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)

        try:
            return item, item.decode(arguments)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid arguments for function '{call.name}': {e}",
                context=call.name,
            ) from e

    @staticmethod
    def _to_message(call: ChatFunctionCall, result: Any) -> ChatMessage:
        return ChatMessage(
            role=ChatMessageRole.FUNCTION,
            content=to_json(result, indent=2).decode(),
            name=call.name,
        )

    def execute(self, call: ChatFunctionCall) -> ChatMessage:
        """
        Run a function call issued by the model.

        Args:
            call: The function_call from an assistant message

        Returns:
            A function message holding the pretty-printed JSON result, named
            exactly as the call was. A namespaced name such as
            "functions.search" is not a valid message name, so rename the
            message (message.model_copy(update={"name": "search"})) before
            sending it back or encoding fails with InvariantViolation.

        Raises:
            FunctionNotFoundError: No function is registered under the name
            DecodeError: The arguments do not decode into the input type; the
                callback is not invoked
        """
        item, arguments = self._prepare(call)
        log.debug(f"Executing function: {call.name}")
        return self._to_message(call, item.callback(arguments))

    async def execute_async(self, call: ChatFunctionCall) -> ChatMessage:
        """Like execute, awaiting the callback's result when it is awaitable."""
        item, arguments = self._prepare(call)
        log.debug(f"Executing function: {call.name}")
        result = item.callback(arguments)
        if inspect.isawaitable(result):
            result = await result
        return self._to_message(call, result)


function_executor = FunctionExecutor()
