import socket
import logging
from typing import Optional

import psutil
from dotenv import load_dotenv
from flask import Flask, Response, jsonify
from prometheus_client import CollectorRegistry, Gauge, generate_latest, CONTENT_TYPE_LATEST

from .backend import LocalStatsBackend, send_startup_requests
from .config import BaseConfig
from .dispatch import CommandQueue
from .janitor import JanitorTimer
from .state import DashboardState

load_dotenv()


class Runtime:
    """Long-lived collaborators owned by one app instance."""

    def __init__(self, state: DashboardState, commands: CommandQueue,
                 backend: Optional[LocalStatsBackend], janitor: JanitorTimer):
        self.state = state
        self.commands = commands
        self.backend = backend
        self.janitor = janitor

    def start(self) -> None:
        self.commands.start()
        self.janitor.start()
        if self.backend is not None:
            self.backend.start()

    def stop(self) -> None:
        if self.backend is not None:
            self.backend.stop()
        self.janitor.stop()
        self.commands.stop()


def build_runtime(config) -> Runtime:
    state = DashboardState.from_config(config)
    commands = CommandQueue(state)
    backend = LocalStatsBackend(
        publish=commands.submit_snapshot,
        push_interval=config.get("PUSH_INTERVAL", 1.0),
        default_poll=config.get("DEFAULT_POLL_FREQUENCY", 1000),
    )
    janitor = JanitorTimer(state.policy.cleanup_interval, commands.submit_cleanup)
    return Runtime(state, commands, backend, janitor)


def create_app(config_object: object | str | None = None) -> Flask:
    app = Flask(__name__)

    # Load default config then override with provided config object
    app.config.from_object(BaseConfig)
    if config_object:
        if isinstance(config_object, str):
            app.config.from_envvar(config_object, silent=True)
        else:
            app.config.from_mapping(config_object)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Raises ValueError on an unusable retention window
    runtime = build_runtime(app.config)
    app.extensions["statline"] = runtime

    from .api import api_bp

    app.register_blueprint(api_bp)

    @app.route("/health")
    def health_check():
        return jsonify({"status": "healthy", "service": "statline"})

    @app.route("/metrics")
    def metrics():
        registry = CollectorRegistry()
        hostname = socket.gethostname()

        samples_g = Gauge(
            "statline_chart_samples",
            "Samples currently held per chart track",
            ["hostname", "chart", "track"],
            registry=registry,
        )
        charts_g = Gauge(
            "statline_charts", "Charts in the registry", ["hostname"], registry=registry
        )
        net_g = Gauge(
            "statline_net_total_bytes_per_second",
            "Summed throughput over all adapters",
            ["hostname", "direction"],
            registry=registry,
        )
        window_g = Gauge(
            "statline_window_start_seconds",
            "Start of the displayed chart window (epoch seconds)",
            ["hostname"],
            registry=registry,
        )
        mem_rss_g = Gauge(
            "statline_memory_rss_bytes",
            "Process RSS memory in bytes",
            ["hostname"],
            registry=registry,
        )

        state = runtime.state
        with state.lock:
            for entry in state.registry:
                for index, series in enumerate(entry.tracks):
                    samples_g.labels(hostname=hostname, chart=entry.key, track=str(index)).set(len(series))
            charts_g.labels(hostname=hostname).set(len(state.registry))
            net_g.labels(hostname=hostname, direction="down").set(state.net_total["downSpeed"])
            net_g.labels(hostname=hostname, direction="up").set(state.net_total["upSpeed"])
            window_g.labels(hostname=hostname).set(state.window_start or 0)

        try:
            mem_rss_g.labels(hostname=hostname).set(psutil.Process().memory_info().rss)
        except psutil.Error:
            mem_rss_g.labels(hostname=hostname).set(0)

        return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)

    # Security headers
    @app.after_request
    def set_security_headers(response):
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Content-Security-Policy", "default-src 'self'")
        return response

    # Configure the backend once, then start the workers when enabled and not testing
    send_startup_requests(runtime.backend, app.config)
    try:
        if app.config.get("WORKERS_ENABLED") and not app.config.get("TESTING"):
            runtime.start()
    except Exception:
        logging.getLogger(__name__).exception("Failed to start statline workers")

    return app


__all__ = ["create_app", "build_runtime", "Runtime"]
