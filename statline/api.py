import time

from flask import Blueprint, current_app, jsonify, request

from .auth import require_api_key

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _runtime():
    return current_app.extensions["statline"]


@api_bp.route("/stats", methods=["GET"])
def get_stats():
    stats = _runtime().state.snapshot_stats()
    stats["time"] = time.strftime("%H:%M")
    return jsonify(stats)


@api_bp.route("/stats", methods=["POST"])
@require_api_key
def update_stats():
    """Receive a snapshot pushed by an external backend (updateStats)."""
    snapshot = request.get_json(silent=True)
    if not isinstance(snapshot, dict):
        return jsonify({"error": "Expected a JSON object"}), 400
    _runtime().commands.submit_snapshot(snapshot)
    return jsonify({"queued": True}), 202


@api_bp.route("/charts")
def list_charts():
    return jsonify(_runtime().state.charts_as_dict())


@api_bp.route("/charts/<key>")
def get_chart(key):
    state = _runtime().state
    with state.lock:
        entry = state.registry.get(key)
        if entry is None:
            return jsonify({"error": f"Unknown chart {key}"}), 404
        return jsonify(entry.to_dict())


@api_bp.route("/widget")
def widget_geometry():
    backend = _runtime().backend
    geometry = backend.geometry if backend is not None else None
    if geometry is None:
        geometry = current_app.config.get("WIDGET_GEOMETRY", {})
    return jsonify(geometry)
