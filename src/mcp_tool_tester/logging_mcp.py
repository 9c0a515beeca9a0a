"""
Sistema de logging para interacciones MCP
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER_NAME = "mcp_tool_tester"


class MCPLogger:
    """Logger especializado para interacciones con el servidor MCP"""

    def __init__(self, log_file: Optional[str] = None, debug: bool = False):
        self.log_file = log_file
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

        # Sin destino explícito se reutilizan los handlers ya configurados
        if log_file or debug:
            self._configure(log_file, debug)
        elif not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    def _configure(self, log_file: Optional[str], debug: bool):
        # Evitar duplicados si se reconfigura
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s"
            ))
            self.logger.addHandler(file_handler)

        # Consola sólo en modo debug
        if debug:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
            self.logger.addHandler(console_handler)

    def log_interaction(self, server_url: str, interaction_type: str, data: Any,
                        level: int = logging.INFO):
        """Registra una interacción con el servidor MCP"""
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "server": server_url,
            "type": interaction_type,
            "data": self._sanitize_data(data),
        }
        self.logger.log(level, f"MCP Interaction: {json.dumps(log_entry, ensure_ascii=False, default=str)}")

    def log_connection(self, server_url: str, status: str, details: str = ""):
        self.log_interaction(server_url, f"CONNECTION_{status.upper()}", {"details": details})

    def log_tool_call(self, server_url: str, tool_name: str, arguments: Dict[str, Any]):
        self.log_interaction(server_url, "TOOL_CALL", {
            "tool": tool_name,
            "arguments": arguments,
        })

    def log_tool_response(self, server_url: str, tool_name: str, result: Any,
                          duration_ms: Optional[float] = None):
        self.log_interaction(server_url, "TOOL_RESPONSE", {
            "tool": tool_name,
            "result": str(result),
            "duration_ms": duration_ms,
        })

    def log_error(self, server_url: str, interaction_type: str, error: str,
                  context: Optional[Dict[str, Any]] = None):
        self.log_interaction(server_url, interaction_type, {
            "error": error,
            "context": context or {},
        }, level=logging.ERROR)

    def _sanitize_data(self, data: Any) -> Any:
        """Trunca datos largos antes de escribirlos"""
        if isinstance(data, str) and len(data) > 1000:
            return data[:1000] + "... [truncated]"
        elif isinstance(data, dict):
            return {k: self._sanitize_data(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._sanitize_data(item) for item in data[:10]]  # Max 10 items
        return data
