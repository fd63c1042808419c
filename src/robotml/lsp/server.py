"""
RobotML Language Server Protocol (LSP) Server.

This module implements the RobotML language server using pygls. It provides:

- Document synchronization (open, change, save, close)
- Diagnostics (parse errors, type errors, warnings, implicit casts)
- The ``robotml/interpret`` notification: the client sends a document URI
  and the server replies with a ``robotml/interpretResult`` notification
  carrying the robot commands that document produces

Usage:
    # Start the server in stdio mode (for IDE integration)
    robotml-lsp

    # Start in TCP mode (for debugging)
    robotml-lsp --tcp --port 2087
"""

import logging
from typing import Any, Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from robotml import __version__
from robotml.lsp.diagnostics import DiagnosticProvider
from robotml.pipeline import RunPipeline

logger = logging.getLogger("robotml-lsp")

INTERPRET = "robotml/interpret"
INTERPRET_RESULT = "robotml/interpretResult"


def interpret_document(source: str, uri: str) -> dict[str, Any]:
    """
    Check and interpret a document, shaped as an interpret-result payload.

    Args:
        source: The RobotML source code
        uri: The document URI

    Returns:
        A mapping with ``uri``, ``success``, ``result`` (commands and
        timestamps, or None), ``diagnostics`` and, on failure, ``error``
    """
    outcome = RunPipeline().run_source(source, uri)
    payload: dict[str, Any] = {
        "uri": uri,
        "success": outcome.success,
        "result": outcome.result.to_dict() if outcome.result is not None else None,
        "diagnostics": [d.to_dict() for d in outcome.diagnostics],
    }
    if outcome.error is not None:
        payload["error"] = outcome.error.message
    return payload


def _uri_from_params(params: Any) -> Optional[str]:
    """Accept a bare URI string, a mapping or an object with a ``uri`` field."""
    if isinstance(params, str):
        return params
    if isinstance(params, dict):
        return params.get("uri")
    return getattr(params, "uri", None)


class RobotMLLanguageServer(LanguageServer):
    """
    Language Server Protocol implementation for RobotML.

    Every open document is re-checked on open, change and save, and its
    diagnostics are published to the client.
    """

    def __init__(self) -> None:
        """Initialize the RobotML language server."""
        super().__init__(
            name="robotml-lsp",
            version=f"v{__version__}",
        )

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all LSP request and notification handlers."""
        # Document synchronization
        self.feature(types.TEXT_DOCUMENT_DID_OPEN)(self._on_did_open)
        self.feature(types.TEXT_DOCUMENT_DID_CHANGE)(self._on_did_change)
        self.feature(types.TEXT_DOCUMENT_DID_SAVE)(self._on_did_save)
        self.feature(types.TEXT_DOCUMENT_DID_CLOSE)(self._on_did_close)

        # Interpretation
        self.feature(INTERPRET)(self._on_interpret)

    def _publish_diagnostics(self, uri: str, diagnostics: list[types.Diagnostic]) -> None:
        """Publish diagnostics to the client."""
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    def _validate(self, uri: str, source: str) -> None:
        diagnostics = DiagnosticProvider(source, uri).get_diagnostics()
        logger.debug(f"{len(diagnostics)} diagnostic(s) for {uri}")
        self._publish_diagnostics(uri, diagnostics)

    # =========================================================================
    # Document Synchronization
    # =========================================================================

    def _on_did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Handle document open notification."""
        document = params.text_document
        logger.info(f"Document opened: {document.uri}")
        self._validate(document.uri, document.text)

    def _on_did_change(self, params: types.DidChangeTextDocumentParams) -> None:
        """Handle document change notification."""
        uri = params.text_document.uri

        doc = self.workspace.get_text_document(uri)
        if doc is None:
            return

        logger.debug(f"Document changed: {uri}")
        self._validate(uri, doc.source)

    def _on_did_save(self, params: types.DidSaveTextDocumentParams) -> None:
        """Handle document save notification."""
        uri = params.text_document.uri
        logger.info(f"Document saved: {uri}")

        doc = self.workspace.get_text_document(uri)
        if doc:
            self._validate(uri, doc.source)

    def _on_did_close(self, params: types.DidCloseTextDocumentParams) -> None:
        """Handle document close notification."""
        uri = params.text_document.uri
        logger.info(f"Document closed: {uri}")
        self._publish_diagnostics(uri, [])

    # =========================================================================
    # Interpretation
    # =========================================================================

    def _on_interpret(self, params: Any) -> None:
        """Handle the interpret notification by running the named document."""
        uri = _uri_from_params(params)
        if uri is None:
            logger.warning(f"{INTERPRET} received without a document URI")
            payload = {
                "uri": None,
                "success": False,
                "result": None,
                "diagnostics": [],
                "error": "No document URI given",
            }
            self.protocol.notify(INTERPRET_RESULT, payload)
            return

        logger.info(f"Interpreting {uri}")
        doc = self.workspace.get_text_document(uri)
        payload = interpret_document(doc.source, uri)
        if payload["success"]:
            count = len(payload["result"]["commands"])
            logger.info(f"Interpretation of {uri} produced {count} command(s)")
        else:
            logger.info(f"Interpretation of {uri} failed: {payload.get('error')}")
        self.protocol.notify(INTERPRET_RESULT, payload)


# =============================================================================
# Server Creation and Main Entry Point
# =============================================================================


def create_server() -> RobotMLLanguageServer:
    """Create and configure a RobotML language server instance."""
    server = RobotMLLanguageServer()

    @server.feature(types.INITIALIZED)
    def on_initialized(
        params: types.InitializedParams,  # noqa: ARG001
    ) -> None:
        """Handle initialized notification."""
        logger.info("RobotML Language Server initialized successfully")

    @server.feature(types.SHUTDOWN)
    def on_shutdown(
        params: None,  # noqa: ARG001
    ) -> None:
        """Handle shutdown request."""
        logger.info("Shutting down RobotML Language Server")

    return server


def main(argv: Optional[list[str]] = None) -> None:
    """
    Main entry point for the RobotML language server.

    Starts the server in stdio mode for IDE integration.
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="RobotML Language Server",
        prog="robotml-lsp",
    )
    parser.add_argument(
        "--tcp",
        action="store_true",
        help="Start server in TCP mode instead of stdio",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to in TCP mode (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=2087,
        help="Port to listen on in TCP mode (default: 2087)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Logging level (default: info)",
    )

    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level.upper())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("robotml-lsp").setLevel(log_level)
    logging.getLogger("robotml").setLevel(log_level)

    server = create_server()

    if args.tcp:
        logger.info(f"Starting RobotML LSP in TCP mode on {args.host}:{args.port}")
        server.start_tcp(args.host, args.port)
    else:
        logger.info("Starting RobotML LSP in stdio mode")
        server.start_io()


if __name__ == "__main__":
    main()
