from setuptools import setup, find_packages

setup(
    name="mcp-tool-tester",
    version="1.0.0",
    description="Cliente interactivo para listar y probar herramientas de servidores MCP remotos",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "mcp[ws]>=1.6,<2",
        "anthropic>=0.40",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7", "anyio"],
    },
    entry_points={
        "console_scripts": [
            "mcp-tool-tester=mcp_tool_tester.cli:main",
        ],
    },
    python_requires=">=3.10",
)
