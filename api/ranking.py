"""Vercel serverless function for the aim trainer world ranking, backed by Upstash Redis."""

import json
import urllib.parse
from http.server import BaseHTTPRequestHandler

from api.routes import handle_ranking_routes
from api.security import env_validator  # noqa: F401  validates env on import in production
from api.security.validators import validate_request_body_size


# ============== HANDLER ==============

ALLOWED_METHODS = 'GET, POST, PUT, DELETE, OPTIONS'


class InvalidBody(ValueError):
    """Raised when the request body is too large or not JSON."""


class handler(BaseHTTPRequestHandler):
    def _send_cors_headers(self):
        # The game client is served from several hosts
        self.send_header('Access-Control-Allow-Origin', '*')
        self.send_header('Access-Control-Allow-Methods', ALLOWED_METHODS)
        self.send_header('Access-Control-Allow-Headers', 'Content-Type, Authorization')

    def _send_json(self, data, status=200):
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self._send_cors_headers()
        # Security headers
        self.send_header('X-Content-Type-Options', 'nosniff')
        self.send_header('Referrer-Policy', 'strict-origin-when-cross-origin')
        self.send_header('Cache-Control', 'no-store, no-cache, must-revalidate')
        self.end_headers()
        self.wfile.write(json.dumps(data, ensure_ascii=False).encode())

    def _send_error(self, message, status=400, reason=None):
        body = {"error": message}
        if reason:
            body["reason"] = reason
        self._send_json(body, status)

    def _get_body(self):
        try:
            content_length = int(self.headers.get('Content-Length', 0) or 0)
        except ValueError:
            raise InvalidBody("Invalid Content-Length")
        if content_length < 0:
            raise InvalidBody("Invalid Content-Length")
        is_valid, error = validate_request_body_size(content_length)
        if not is_valid:
            raise InvalidBody(error)
        if content_length:
            try:
                return json.loads(self.rfile.read(content_length))
            except ValueError:
                raise InvalidBody("Request body must be JSON")
        return {}

    def _parse_path(self):
        parsed = urllib.parse.urlsplit(self.path)
        self._query = dict(urllib.parse.parse_qsl(parsed.query))
        return parsed.path.rstrip('/') or '/'

    def get_query_param(self, name, default=None):
        return self._query.get(name, default)

    def _dispatch(self, method):
        path = self._parse_path()
        try:
            body = self._get_body() if method != 'GET' else {}
        except InvalidBody as e:
            return self._send_error(str(e), 400, "invalid_input")

        try:
            result = handle_ranking_routes(self, method, path, body)
        except Exception as e:
            print(f"[API] Unhandled error on {method} {path}: {e.__class__.__name__}: {e}")  # Log server-side only
            return self._send_error("Internal server error", 500, "internal_error")

        if result is None:
            return self._send_error("Not found", 404, "not_found")
        status, response = result
        return self._send_json(response, status)

    def do_OPTIONS(self):
        self.send_response(200)
        self._send_cors_headers()
        self.send_header('Access-Control-Max-Age', '86400')
        self.end_headers()

    def do_GET(self):
        self._dispatch('GET')

    def do_POST(self):
        self._dispatch('POST')

    def do_PUT(self):
        self._dispatch('PUT')

    def do_DELETE(self):
        self._dispatch('DELETE')
