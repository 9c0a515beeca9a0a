"""
Generación estructurada de parámetros con un LLM.

Un StructuredGenerator recibe el inputSchema de una herramienta y una
instrucción en lenguaje natural, y devuelve un objeto que cumple el schema.
La implementación por defecto usa Anthropic forzando una llamada a una
única herramienta cuyo input_schema es el de la herramienta MCP.
"""
from typing import Any, Dict, Optional, Protocol

import anthropic

GENERATION_TOOL_NAME = "fill_parameters"


class GenerationError(Exception):
    """Fallo al generar parámetros (credencial, red, schema imposible...)"""


class StructuredGenerator(Protocol):
    def generate(self, *, schema: Dict[str, Any], prompt: str) -> Dict[str, Any]:
        ...


def _as_object_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    # Anthropic exige type=object en input_schema
    schema = dict(schema or {})
    schema.setdefault("type", "object")
    return schema


class AnthropicGenerator:
    """Generador estructurado sobre la API de mensajes de Anthropic"""

    def __init__(self, api_key: str, model: str, max_tokens: int = 4096, client: Any = None):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def generate(self, *, schema: Dict[str, Any], prompt: str) -> Dict[str, Any]:
        tool = {
            "name": GENERATION_TOOL_NAME,
            "description": "Fill in the parameters for the tool call described by the user.",
            "input_schema": _as_object_schema(schema),
        }
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                tools=[tool],
                tool_choice={"type": "tool", "name": GENERATION_TOOL_NAME},
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AnthropicError as e:
            raise GenerationError(str(e)) from e

        for content_block in response.content:
            if content_block.type == "tool_use":
                return dict(content_block.input)

        raise GenerationError("The model did not return structured parameters")


def build_generator(api_key: Optional[str], model: str, max_tokens: int) -> StructuredGenerator:
    if not api_key:
        raise GenerationError("An Anthropic API key is required")
    return AnthropicGenerator(api_key=api_key, model=model, max_tokens=max_tokens)
