"""
Configuración del tester, leída del entorno (y de .env si existe).

El resto de módulos recibe un Settings explícito en lugar de leer
variables de entorno por su cuenta.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_SERVER_URL = "ws://localhost:8000/ws"
DEFAULT_MODEL = "claude-3-7-sonnet-latest"


@dataclass
class Settings:
    # Anthropic
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = DEFAULT_MODEL
    max_tokens: int = 4096

    # Identidad del cliente MCP
    client_name: str = "webdraw"
    client_version: str = "1.0.0"

    # Logging
    log_file: Optional[str] = "mcp_interactions.log"
    debug: bool = False

    def has_api_key(self) -> bool:
        return bool(self.anthropic_api_key)


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Construye Settings a partir del entorno"""
    load_dotenv(env_file)

    log_file = os.getenv("MCP_LOG_FILE", "mcp_interactions.log").strip()

    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        anthropic_model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
        max_tokens=int(os.getenv("ANTHROPIC_MAX_TOKENS", "4096")),
        client_name=os.getenv("MCP_CLIENT_NAME", "webdraw"),
        client_version=os.getenv("MCP_CLIENT_VERSION", "1.0.0"),
        log_file=log_file or None,
        debug=os.getenv("HOST_DEBUG", "0") == "1",
    )
