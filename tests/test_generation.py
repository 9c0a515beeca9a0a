from types import SimpleNamespace

import anthropic
import pytest

from mcp_tool_tester.generation import (
    GENERATION_TOOL_NAME,
    AnthropicGenerator,
    GenerationError,
    build_generator,
)


class FakeMessages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def make_generator(messages):
    return AnthropicGenerator(api_key="sk-test", model="claude-test", max_tokens=256,
                              client=SimpleNamespace(messages=messages))


SCHEMA = {"properties": {"city": {"type": "string"}}, "required": ["city"]}


def test_generate_forces_schema_tool_and_returns_its_input():
    messages = FakeMessages(SimpleNamespace(content=[
        SimpleNamespace(type="text", text="Sure"),
        SimpleNamespace(type="tool_use", input={"city": "Lisbon"}),
    ]))

    params = make_generator(messages).generate(schema=SCHEMA, prompt="weather in Lisbon")

    assert params == {"city": "Lisbon"}
    request = messages.requests[0]
    assert request["model"] == "claude-test"
    assert request["max_tokens"] == 256
    assert request["tool_choice"] == {"type": "tool", "name": GENERATION_TOOL_NAME}
    assert request["tools"][0]["input_schema"]["type"] == "object"
    assert request["tools"][0]["input_schema"]["properties"] == SCHEMA["properties"]
    assert request["messages"] == [{"role": "user", "content": "weather in Lisbon"}]
    # el schema original no se modifica
    assert "type" not in SCHEMA


def test_generate_without_tool_use_block_fails():
    messages = FakeMessages(SimpleNamespace(content=[SimpleNamespace(type="text", text="no")]))
    with pytest.raises(GenerationError):
        make_generator(messages).generate(schema=SCHEMA, prompt="?")


def test_sdk_errors_become_generation_errors():
    messages = FakeMessages(error=anthropic.AnthropicError("invalid x-api-key"))
    with pytest.raises(GenerationError, match="invalid x-api-key"):
        make_generator(messages).generate(schema=SCHEMA, prompt="?")


def test_build_generator_requires_api_key():
    with pytest.raises(GenerationError):
        build_generator(None, "claude-test", 256)
