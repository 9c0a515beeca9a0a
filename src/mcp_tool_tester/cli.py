import asyncio
import getpass
import json
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import Settings, get_settings
from .connection import MCPConnection, parse_target
from .display import NO_DESCRIPTION, format_tool_list, render_result, tool_label
from .generation import StructuredGenerator, build_generator
from .logging_mcp import MCPLogger

MENU_LIST = "List all tools"
MENU_TEST = "Test a tool"
MENU_EXIT = "Exit"
MENU_CHOICES = [MENU_LIST, MENU_TEST, MENU_EXIT]

GeneratorFactory = Callable[[Settings], StructuredGenerator]


def default_generator_factory(settings: Settings) -> StructuredGenerator:
    return build_generator(settings.anthropic_api_key, settings.anthropic_model, settings.max_tokens)


# Prompts de consola

def choose(message: str, choices: Sequence[str]) -> int:
    """Menú numerado; devuelve el índice (base 0) elegido"""
    print(f"\n{message}")
    for i, choice in enumerate(choices, 1):
        print(f"  {i}) {choice}")
    while True:
        raw = input("> ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(choices):
            return int(raw) - 1
        print(f"Please enter a number between 1 and {len(choices)}.")


def confirm(message: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    raw = input(f"{message} ({hint}): ").strip().lower()
    if not raw:
        return default
    return raw in ("y", "yes")


def ask_api_key() -> str:
    while True:
        api_key = getpass.getpass("Please enter your Anthropic API key: ").strip()
        if api_key:
            return api_key
        print("API key is required")


def collect_manual_params(properties: Dict[str, Any]) -> Dict[str, Any]:
    """Pide cada parámetro como texto, sin coerción de tipos ni validación"""
    params = {}
    for param_name, param_schema in properties.items():
        schema = param_schema if isinstance(param_schema, dict) else {}
        message = f"Enter value for {param_name} ({schema.get('description') or NO_DESCRIPTION})"
        if "default" in schema:
            message += f" [{schema['default']}]"
        value = input(f"{message}: ")
        if value == "" and "default" in schema:
            value = schema["default"]
        params[param_name] = value
    return params


def generate_params(schema: Dict[str, Any], settings: Settings,
                    generator_factory: GeneratorFactory) -> Dict[str, Any]:
    # La API key vive en Settings durante la sesión; no se exporta al entorno
    if not settings.has_api_key():
        settings.anthropic_api_key = ask_api_key()

    prompt = input("Enter a prompt to fill in the parameters: ")
    generator = generator_factory(settings)
    params = generator.generate(schema=schema, prompt=prompt)

    print("\n[GENERATED INPUT]\n", json.dumps(params, indent=2, ensure_ascii=False, default=str), "\n")
    return params


# Acciones del menú

async def list_tools(connection: MCPConnection):
    print("Fetching available tools...")
    tools = await connection.list_tools()
    if not tools:
        print("No tools available.")
        return

    print("\nAvailable tools:")
    for line in format_tool_list(tools):
        print(line)


async def test_tool(connection: MCPConnection, settings: Settings,
                    generator_factory: GeneratorFactory = default_generator_factory,
                    logger: Optional[MCPLogger] = None):
    logger = logger or connection.logger
    tools: List[Dict[str, Any]] = await connection.list_tools()
    if not tools:
        print("No tools available to test.")
        return

    index = choose("Select a tool to test:", [tool_label(t) for t in tools])
    selected = tools[index]
    name = selected["name"]
    print(f"\nSelected tool: {name}")

    params: Dict[str, Any] = {}
    schema = selected.get("inputSchema") or {}
    properties = schema.get("properties")
    if isinstance(properties, dict) and properties:
        print("\nThis tool requires parameters.")
        if confirm("Would you like to use an LLM prompt to fill in the parameters?", default=False):
            logger.log_interaction(connection.server_url, "GENERATION_REQUEST", {
                "tool": name,
                "model": settings.anthropic_model,
            })
            try:
                params = generate_params(schema, settings, generator_factory)
            except Exception as e:
                logger.log_error(connection.server_url, "GENERATION_ERROR", str(e), {"tool": name})
                print(f"Error generating parameters for tool {name}: {e}", file=sys.stderr)
                return
        else:
            params = collect_manual_params(properties)

    try:
        print("\nExecuting tool...")
        result = await connection.call_tool(name, params)
    except Exception as e:
        print(f"Error executing tool {name}: {e}", file=sys.stderr)
        return

    print("\nTool execution result:")
    for line in render_result(result):
        print(line)


async def menu_loop(connection: MCPConnection, settings: Settings,
                    generator_factory: GeneratorFactory = default_generator_factory) -> int:
    """Loop principal; devuelve el código de salida"""
    while True:
        # Ctrl-C o EOF en cualquier prompt equivale a Exit
        try:
            action = MENU_CHOICES[choose("What would you like to do?", MENU_CHOICES)]
            if action == MENU_LIST:
                await list_tools(connection)
            elif action == MENU_TEST:
                await test_tool(connection, settings, generator_factory)
        except (KeyboardInterrupt, EOFError):
            action = MENU_EXIT
            print()

        if action == MENU_EXIT:
            print("Goodbye!")
            return 0


async def run(argv: Sequence[str], settings: Optional[Settings] = None,
              connection_factory: Callable[..., MCPConnection] = MCPConnection,
              generator_factory: GeneratorFactory = default_generator_factory) -> int:
    settings = settings or get_settings()
    logger = MCPLogger(log_file=settings.log_file, debug=settings.debug)

    try:
        target = parse_target(argv)
        print(f"Connecting to MCP server at {target.server_url} "
              f"using {target.transport_kind.value.upper()} transport...")
        connection = connection_factory(
            target,
            logger=logger,
            client_name=settings.client_name,
            client_version=settings.client_version,
        )
        await connection.connect()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Connected successfully!")
    try:
        return await menu_loop(connection, settings, generator_factory)
    finally:
        await connection.close()


def main(argv: Optional[Sequence[str]] = None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        code = asyncio.run(run(argv))
    except KeyboardInterrupt:
        print("\nInterrupted")
        code = 1
    except Exception as e:
        print(f"Unhandled error: {e!r}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
