"""Flask ingestion server for the endpoints the HTTP sink posts to."""

import logging
import threading

from flask import Flask, jsonify, request

logger = logging.getLogger(__name__)

VALID_TYPES = frozenset({"info", "warning", "error"})


class ReceivedLogs:
    """Thread-safe record of everything the server accepted."""

    def __init__(self):
        self._lock = threading.Lock()
        self._single: list[dict] = []
        self._batches: list[list[dict]] = []

    def add_single(self, entry: dict):
        with self._lock:
            self._single.append(entry)

    def add_batch(self, entries: list[dict]):
        with self._lock:
            self._batches.append(list(entries))

    @property
    def single(self) -> list[dict]:
        with self._lock:
            return list(self._single)

    @property
    def batches(self) -> list[list[dict]]:
        with self._lock:
            return [list(b) for b in self._batches]

    def stats(self) -> dict:
        with self._lock:
            return {
                "single_received": len(self._single),
                "batches_received": len(self._batches),
                "batched_entries": sum(len(b) for b in self._batches),
            }


def _valid_single(body) -> bool:
    return (
        isinstance(body, dict)
        and body.get("type") in VALID_TYPES
        and isinstance(body.get("message"), str)
        and (body.get("extra") is None or isinstance(body.get("extra"), (dict, list)))
    )


def _valid_batch(body) -> bool:
    if not isinstance(body, dict) or not isinstance(body.get("logs"), list):
        return False
    return all(
        isinstance(item, dict)
        and isinstance(item.get("timestamp"), str)
        and isinstance(item.get("entry"), str)
        for item in body["logs"]
    )


def create_sink_app(received: ReceivedLogs | None = None) -> Flask:
    app = Flask(__name__)
    store = received if received is not None else ReceivedLogs()

    @app.route("/logs", methods=["POST"])
    def ingest_one():
        body = request.get_json(silent=True)
        if not _valid_single(body):
            return jsonify(status="error", reason="malformed log event"), 400
        store.add_single(body)
        logger.debug("Accepted %s event: %s", body["type"], body["message"])
        return jsonify(status="ok")

    @app.route("/logs/bulk", methods=["POST"])
    def ingest_bulk():
        body = request.get_json(silent=True)
        if not _valid_batch(body):
            return jsonify(status="error", reason="malformed log batch"), 400
        store.add_batch(body["logs"])
        logger.info("Accepted batch of %d buffered entries", len(body["logs"]))
        return jsonify(status="ok", accepted=len(body["logs"]))

    @app.route("/stats")
    def stats():
        return jsonify(store.stats())

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    return app


def run_sink_server(app: Flask, host: str, port: int):
    app.run(host=host, port=port, use_reloader=False)
