"""HTTP status endpoint for hosting platforms and uptime checks."""

import threading

from flask import Flask, jsonify
from werkzeug.serving import make_server

from log_utils import log


def create_app(bot):
    """Build the Flask app exposing ``bot.status()`` as JSON."""
    app = Flask(__name__)

    @app.after_request
    def _allow_any_origin(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.route("/")
    @app.route("/status")
    def status():
        return jsonify(bot.status())

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


class StatusServer:
    """Serves the status app from a daemon thread next to the bot loop."""

    def __init__(self, bot, host="0.0.0.0", port=3000):
        self.host = host
        self.port = port
        self.app = create_app(bot)
        self._server = None
        self._thread = None

    def start(self):
        self._server = make_server(self.host, self.port, self.app, threaded=True)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        log(f"Bot status server running on port {self.port}")

    def stop(self):
        if self._server is not None:
            self._server.shutdown()
            self._server = None
            log("Status server stopped")
