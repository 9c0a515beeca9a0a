"""
Cliente interactivo para probar herramientas de servidores MCP remotos
"""
__version__ = "1.0.0"
