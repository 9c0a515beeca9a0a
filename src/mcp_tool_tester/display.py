"""
Formato de salida para herramientas y resultados
"""
from typing import Any, Dict, List, Mapping

NO_DESCRIPTION = "No description"
TRUNCATE_OVER = 40
TRUNCATE_AT = 30


def truncate_description(description: str) -> str:
    # Se corta a 30 sólo si supera 40
    description = description or NO_DESCRIPTION
    if len(description) > TRUNCATE_OVER:
        return description[:TRUNCATE_AT] + "..."
    return description


def tool_label(tool: Mapping[str, Any]) -> str:
    return f"{tool['name']} - {truncate_description(tool.get('description'))}"


def format_tool_list(tools: List[Dict[str, Any]]) -> List[str]:
    return [f"{i}. {tool_label(tool)}" for i, tool in enumerate(tools, 1)]


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def render_result(result: Any) -> List[str]:
    """
    Líneas a imprimir para el resultado de una herramienta.
    Si content no es una lista se devuelve tal cual; si lo es,
    sólo se muestran los bloques de tipo "text".
    """
    content = _field(result, "content")
    if not isinstance(content, (list, tuple)):
        return [content]

    return [_field(block, "text") for block in content if _field(block, "type") == "text"]
