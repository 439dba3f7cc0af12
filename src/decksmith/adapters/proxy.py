"""Ephemeral loopback HTTP server exposing a workspace folder to the renderer."""

from __future__ import annotations

from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import logging
import mimetypes
import posixpath
import threading
from types import TracebackType
from urllib.parse import quote, unquote, urlsplit

from decksmith.core.diagnostics import DiagnosticEmitter, ensure_emitter
from decksmith.core.documents import DocumentUri, WorkspaceFolder
from decksmith.core.exceptions import ProxyServerError


logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"


class _ProxyHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = False

    def __init__(self, address: tuple[str, int], folder: WorkspaceFolder) -> None:
        self.folder = folder
        super().__init__(address, WorkspaceRequestHandler)


class WorkspaceRequestHandler(BaseHTTPRequestHandler):
    """Serve workspace files addressed by their workspace uri path."""

    server: _ProxyHTTPServer

    def log_message(self, fmt: str, *args: object) -> None:
        logger.debug("proxy %s - %s", self.address_string(), fmt % args)

    def do_GET(self) -> None:
        self._serve(include_body=True)

    def do_HEAD(self) -> None:
        self._serve(include_body=False)

    def _serve(self, *, include_body: bool) -> None:
        request_path = unquote(urlsplit(self.path).path)
        if any(part == ".." for part in request_path.split("/")):
            self._send_status(HTTPStatus.BAD_REQUEST, include_body=include_body)
            return

        folder = self.server.folder
        relative = folder.relative_path(folder.uri.with_path(posixpath.normpath(request_path)))
        if not relative:
            self._send_status(HTTPStatus.NOT_FOUND, include_body=include_body)
            return

        try:
            body = folder.fs.read_bytes(relative)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            self._send_status(HTTPStatus.NOT_FOUND, include_body=include_body)
            return
        except OSError:
            logger.warning("Failed to read %s from workspace %s", relative, folder.name, exc_info=True)
            self._send_status(HTTPStatus.INTERNAL_SERVER_ERROR, include_body=include_body)
            return

        content_type = mimetypes.guess_type(relative)[0] or "application/octet-stream"
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        if include_body:
            self.wfile.write(body)

    def _send_status(self, status: HTTPStatus, *, include_body: bool) -> None:
        body = f"{status.value} {status.phrase}".encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if include_body:
            self.wfile.write(body)


class WorkspaceProxyServer:
    """Handle on a running proxy server bound to one workspace folder."""

    def __init__(self, folder: WorkspaceFolder, *, host: str = LOOPBACK_HOST) -> None:
        self.folder = folder
        self.host = host
        try:
            self._server = _ProxyHTTPServer((host, 0), folder)
        except OSError as exc:
            raise ProxyServerError(
                f"Unable to start proxy server for workspace '{folder.name}': {exc}"
            ) from exc
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name=f"decksmith-proxy-{self.port}",
            daemon=True,
        )
        self._thread.start()
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def port(self) -> int:
        return int(self._server.server_address[1])

    @property
    def disposed(self) -> bool:
        return self._disposed

    def base_url_for(self, uri: DocumentUri) -> str:
        """Return the URL the renderer should use as the document location."""
        path = uri.path if uri.path.startswith("/") else f"/{uri.path}"
        return f"http://{self.host}:{self.port}{quote(path)}"

    def dispose(self) -> None:
        """Stop serving and release the port; later calls do nothing."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()

    def __enter__(self) -> WorkspaceProxyServer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()


def create_workspace_proxy_server(
    folder: WorkspaceFolder,
    *,
    host: str = LOOPBACK_HOST,
    emitter: DiagnosticEmitter | None = None,
) -> WorkspaceProxyServer:
    """Start a proxy server for ``folder`` on a free loopback port."""
    server = WorkspaceProxyServer(folder, host=host)
    ensure_emitter(emitter).event("proxy_start", {"folder": folder.name, "port": server.port})
    return server


__all__ = [
    "LOOPBACK_HOST",
    "WorkspaceProxyServer",
    "WorkspaceRequestHandler",
    "create_workspace_proxy_server",
]
