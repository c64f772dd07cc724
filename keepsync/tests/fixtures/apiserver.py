"""
A threaded wsgi web server, used to fake provider apis in tests.

Exports ApiServer, ApiError, ApiResponse and api_route
"""

import json
import socket
import threading
import logging
import urllib.parse as urlparse
from socketserver import ThreadingMixIn
from wsgiref.simple_server import make_server, WSGIRequestHandler, WSGIServer
from typing import Callable, Dict, Any, Optional, List, Tuple

log = logging.getLogger(__name__)

__all__ = ['ApiServer', 'ApiError', 'ApiResponse', 'api_route']

STATUS_TEXT = {200: "OK", 201: "Created", 202: "Accepted", 400: "Bad Request", 401: "Unauthorized",
               403: "Forbidden", 404: "Not Found", 409: "Conflict", 428: "Precondition Required",
               500: "Internal Server Error", 503: "Service Unavailable"}


class NoLoggingWSGIRequestHandler(WSGIRequestHandler):
    def log_message(self, unused_format, *args):        # pylint: disable=arguments-differ
        pass


class ThreadedWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True
    allow_reuse_address = False


class ApiError(Exception):
    """
    Raise an ApiError in a handler to return something other than '200' to the web client.

    Args:
        code: status code
        msg: message to show
        json: json to return, instead of an error description
    """
    def __init__(self, code, msg=None, json=None):       # pylint: disable=redefined-outer-name
        super().__init__()
        self.code = code
        self.msg = str(msg) if msg else "UNKNOWN"
        self.json = json

    def __str__(self):
        return f"{self.code}, {self.msg}"


class ApiResponse:          # pylint: disable=too-few-public-methods
    """Return one of these from a handler to set the status code or headers."""
    def __init__(self, body: Any = None, *, code: int = 200, headers: Optional[Dict[str, str]] = None):
        self.body = body
        self.code = code
        self.headers = headers or {}


def api_route(path):
    """
    Decorator for handling specific urls.

    If the path ends in a '/', it will handle all routes starting with that path.
    A path of None handles everything not otherwise routed.
    """
    def outer(func):
        if not hasattr(func, "_routes"):
            setattr(func, "_routes", [])
        func._routes += [path]
        return func
    return outer


def _status(code):
    return "%s %s" % (code, STATUS_TEXT.get(code, "Unknown"))


class ApiServer:
    """
    Create handlers by inheriting from ApiServer and tagging them with @api_route("/path").

    Handlers are called with (ctx, req):
        ctx: the wsgi environment, plus "BODY" (raw request bytes)
        req: dict of query args merged with a json or form-encoded body

    Return a dict (sent as json), a str, or an ApiResponse.
    """
    def __init__(self, addr: str = "127.0.0.1", port: int = 0):
        self.__addr = addr
        self.__started = False
        self.__shutting_down = False
        self.__server = make_server(app=self, host=addr, port=port, handler_class=NoLoggingWSGIRequestHandler,
                                    server_class=ThreadedWSGIServer)
        self.__server.socket.setsockopt(socket.SOL_TCP, socket.TCP_NODELAY, 1)
        self.__routes: Dict[Optional[str], Callable] = {}

        # routed methods map into handler
        for fname in dir(self):
            meth = getattr(self, fname)
            if callable(meth) and hasattr(meth, "_routes"):
                for route in meth._routes:      # pylint: disable=protected-access
                    self.add_route(route, meth)

        log.debug("routes %s", list(self.__routes.keys()))

    def add_route(self, path, meth):
        self.__routes[path] = meth

    def port(self):
        return self.__server.server_port

    def uri(self, path="/"):
        """Make a URI pointing at myself"""
        return "http://%s:%s/%s" % (self.__addr, self.port(), path.lstrip("/"))

    def start(self):
        """Serve in a daemon thread"""
        self.__started = True
        threading.Thread(target=self.__server.serve_forever, daemon=True).start()
        return self

    def shutdown(self):
        if self.__started and not self.__shutting_down:
            self.__shutting_down = True
            self.__server.shutdown()
            self.__server.server_close()

    def _find_handler(self, url):
        handler = self.__routes.get(url)
        sub = url
        while handler is None and "/" in sub:
            # adding a route "/foo/" handles /foo/bar/baz
            sub = sub[0:sub.rfind("/")]
            handler = self.__routes.get(sub + "/")
        if handler is None:
            handler = self.__routes.get(None)
        return handler

    @staticmethod
    def _parse(env) -> Tuple[bytes, Dict[str, Any]]:
        length = env.get("CONTENT_LENGTH") or 0
        content = env['wsgi.input'].read(int(length)) if length else b""
        content_type = env.get('CONTENT_TYPE') or ""
        info: Dict[str, Any] = {}
        if content_type.startswith('application/x-www-form-urlencoded'):
            for k, v in urlparse.parse_qs(content.decode("utf8")).items():
                info[k] = v[0] if len(v) == 1 else v
        elif content_type.startswith('application/json') and content:
            try:
                info = json.loads(content)
            except ValueError:
                raise ApiError(400, "Invalid JSON")
            if not isinstance(info, dict):
                info = {"content": info}
        query = env.get('QUERY_STRING')
        if query:
            for k, v in urlparse.parse_qs(query).items():
                info[k] = v[0] if len(v) == 1 else v
        return content, info

    def __call__(self, env, start_response):
        url = env.get('PATH_INFO', '/')
        try:
            content, info = self._parse(env)
            env["BODY"] = content
            handler = self._find_handler(url)
            if not handler:
                raise ApiError(404, f"No handler for {url}")
            response = handler(env, info)
            if not isinstance(response, ApiResponse):
                response = ApiResponse(response)
            body = response.body
            content_type = 'application/json' if isinstance(body, dict) else 'text/plain'
            if isinstance(body, dict):
                body = json.dumps(body)
            data = bytes(str(body if body is not None else ""), "utf-8")
            headers: List[Tuple[str, str]] = [('Content-Type', content_type), ("Content-Length", str(len(data)))]
            headers += list(response.headers.items())
            start_response(_status(response.code), headers)
            return [data]
        except ApiError as e:
            log.debug("%s %s : ERROR : %s", env.get("REQUEST_METHOD"), url, e)
            data = bytes(json.dumps(e.json if e.json is not None else {"code": e.code, "msg": e.msg}), "utf-8")
            start_response(_status(e.code), [('Content-Type', 'application/json'), ("Content-Length", str(len(data)))])
            return [data]
