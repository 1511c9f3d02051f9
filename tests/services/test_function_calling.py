import asyncio
import json
from dataclasses import dataclass
from typing import List

import pytest
from pydantic import BaseModel

from chatwire.errors import DecodeError, FunctionNotFoundError, InvariantViolation
from chatwire.models.chat import ChatFunctionCall, ChatMessageRole
from chatwire.services.function_calling import FunctionExecutor


class SearchArgs(BaseModel):
    query: str
    limit: int = 5


class SearchResult(BaseModel):
    query: str
    hits: List[str]


@dataclass
class Point:
    x: int
    y: int


def search(args: SearchArgs) -> SearchResult:
    return SearchResult(query=args.query, hits=[f"{args.query}-{i}" for i in range(args.limit)])


@pytest.fixture()
def search_executor(executor: FunctionExecutor) -> FunctionExecutor:
    executor.register("search", "Search the knowledge base", SearchArgs, search)
    return executor


def test_register_advertises_input_schema(search_executor):
    functions = search_executor.functions()

    assert len(functions) == 1
    assert functions[0].name == "search"
    assert functions[0].description == "Search the knowledge base"
    assert functions[0].parameters == SearchArgs.model_json_schema()
    assert functions[0].parameters["required"] == ["query"]


def test_functions_keep_registration_order(executor):
    executor.register("b", None, SearchArgs, search)
    executor.register("a", None, Point, lambda p: p)

    assert [f.name for f in executor.functions()] == ["b", "a"]
    assert "description" not in executor.functions()[0].to_wire()


def test_execute_returns_function_message(search_executor):
    call = ChatFunctionCall(name="search", arguments='{"query": "cats", "limit": 2}')

    message = search_executor.execute(call)

    assert message.role is ChatMessageRole.FUNCTION
    assert message.name == "search"
    assert json.loads(message.content) == {"query": "cats", "hits": ["cats-0", "cats-1"]}
    assert message.content.startswith('{\n  "query": "cats",\n')


def test_execute_resolves_namespaced_name(search_executor):
    call = ChatFunctionCall(name="functions.search", arguments='{"query": "dogs", "limit": 1}')

    message = search_executor.execute(call)

    # The name is echoed back as received
    assert message.name == "functions.search"
    assert json.loads(message.content)["hits"] == ["dogs-0"]


def test_namespaced_result_must_be_renamed_before_sending(search_executor):
    call = ChatFunctionCall(name="functions.search", arguments='{"query": "dogs", "limit": 1}')

    message = search_executor.execute(call)

    with pytest.raises(InvariantViolation):
        message.to_wire()
    renamed = message.model_copy(update={"name": "search"})
    assert renamed.to_wire()["name"] == "search"
    assert renamed.content == message.content


def test_execute_prefers_literal_name(executor):
    executor.register("functions.search", None, SearchArgs, lambda a: "literal")
    executor.register("search", None, SearchArgs, lambda a: "stripped")

    message = executor.execute(ChatFunctionCall(name="functions.search", arguments='{"query": "q"}'))

    assert message.content == '"literal"'


@pytest.mark.parametrize("name", ["lookup", "functions.lookup", "search.functions"])
def test_execute_unknown_function(search_executor, name):
    with pytest.raises(FunctionNotFoundError) as exc_info:
        search_executor.execute(ChatFunctionCall(name=name, arguments="{}"))

    assert exc_info.value.name == name
    assert name in str(exc_info.value)


def test_execute_accepts_structured_arguments(search_executor):
    call = ChatFunctionCall(name="search", arguments={"query": "owls", "limit": 1})

    message = search_executor.execute(call)

    assert json.loads(message.content)["hits"] == ["owls-0"]


@pytest.mark.parametrize(
    "arguments",
    [
        '{"query": ',
        "not json at all",
        '{"limit": 3}',
        '{"query": "cats", "limit": "many"}',
        "[]",
        None,
    ],
)
def test_malformed_arguments_do_not_invoke_callback(executor, mocker, arguments):
    callback = mocker.Mock(return_value={})
    executor.register("search", None, SearchArgs, callback)

    with pytest.raises(DecodeError) as exc_info:
        executor.execute(ChatFunctionCall(name="search", arguments=arguments))

    assert exc_info.value.context == "search"
    assert "search" in str(exc_info.value)
    callback.assert_not_called()


def test_last_registration_wins(executor, mocker):
    first = mocker.Mock(return_value={"from": "first"})
    second = mocker.Mock(return_value={"from": "second"})
    executor.register("search", "First", SearchArgs, first)
    executor.register("search", "Second", Point, second)

    functions = executor.functions()
    message = executor.execute(ChatFunctionCall(name="search", arguments='{"x": 1, "y": 2}'))

    assert len(functions) == 1
    assert functions[0].description == "Second"
    assert json.loads(message.content) == {"from": "second"}
    first.assert_not_called()
    second.assert_called_once_with(Point(x=1, y=2))


def test_callback_errors_propagate(executor):
    def explode(args: SearchArgs):
        raise RuntimeError("backend unavailable")

    executor.register("search", None, SearchArgs, explode)

    with pytest.raises(RuntimeError, match="backend unavailable"):
        executor.execute(ChatFunctionCall(name="search", arguments='{"query": "q"}'))


def test_dataclass_input_and_result(executor):
    executor.register("mirror", "Mirror a point", Point, lambda p: Point(x=-p.x, y=-p.y))

    message = executor.execute(ChatFunctionCall(name="mirror", arguments='{"x": 3, "y": 4}'))

    assert executor.functions()[0].parameters["properties"]["x"]["type"] == "integer"
    assert message.content == '{\n  "x": -3,\n  "y": -4\n}'


def test_function_decorator(executor):
    @executor.function()
    def find(args: SearchArgs) -> dict:
        """Find documents."""
        return {"query": args.query}

    definition = executor.functions()[0]
    message = executor.execute(ChatFunctionCall(name="find", arguments='{"query": "x"}'))

    assert definition.name == "find"
    assert definition.description == "Find documents."
    assert find(SearchArgs(query="y")) == {"query": "y"}
    assert json.loads(message.content) == {"query": "x"}


def test_function_decorator_with_explicit_name(executor):
    @executor.function("lookup_point", description="Look up a point")
    def handler(point: Point) -> Point:
        return point

    assert executor.functions()[0].name == "lookup_point"
    assert executor.functions()[0].description == "Look up a point"


def test_function_decorator_requires_annotation(executor):
    with pytest.raises(TypeError):

        @executor.function()
        def untyped(args):
            return args


def test_execute_async_awaits_coroutine_callbacks(executor):
    async def slow_search(args: SearchArgs) -> dict:
        await asyncio.sleep(0)
        return {"query": args.query}

    executor.register("search", None, SearchArgs, slow_search)
    call = ChatFunctionCall(name="functions.search", arguments='{"query": "async"}')

    message = asyncio.run(executor.execute_async(call))

    assert message.name == "functions.search"
    assert json.loads(message.content) == {"query": "async"}


def test_execute_async_accepts_plain_callbacks(search_executor):
    call = ChatFunctionCall(name="search", arguments='{"query": "sync", "limit": 1}')

    message = asyncio.run(search_executor.execute_async(call))

    assert json.loads(message.content)["hits"] == ["sync-0"]
