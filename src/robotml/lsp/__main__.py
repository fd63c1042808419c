"""
Entry point for running the RobotML LSP server as a module.

Usage:
    python -m robotml.lsp
    python -m robotml.lsp --tcp --port 2087
"""

from robotml.lsp.server import main

if __name__ == "__main__":
    main()
