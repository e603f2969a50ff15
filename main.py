"""
main.py — Stepwise Dijkstra Flask API
======================================
The web server a visualizer front-end talks to.  It supplies the graph
and the source, then pulls one micro-step per request.

Routes:
  GET  /api/algorithm          – metadata card (pseudocode, options)
  POST /api/graph              – import graph from text or dict
  POST /api/graph/generate     – generate a random graph
  GET  /api/graph              – current graph
  POST /api/run                – start a run (source + config)
  POST /api/step/next          – advance one micro-step
  POST /api/step/prev          – rewind the display one step
  POST /api/step/goto          – jump the display to step N
  POST /api/step/play          – toggle play/pause
  GET  /api/state              – state as of the displayed step
  GET  /api/summary            – textual summary (+ path with ?vertex=)

State management:
  The graph lives in the Flask session (serialised, as in the editor).
  Runs hold a live engine, which does not serialise, so they live in an
  in-process registry keyed by a run id stored in the session.  Each run
  has its own lock; the engine itself is single-threaded.
"""

import logging
import secrets
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session

from algorithms import (
    INFO,
    ConfigError,
    DijkstraConfig,
    DijkstraError,
    InputError,
    StepAfterCompletion,
    StepwiseDijkstra,
    UnknownVertex,
    Unreachable,
)
from engine import Stepper
from graph import Graph


class NoRun(Exception):
    """No run is attached to this session."""


# ---------------------------------------------------------------------------
# Run registry
# ---------------------------------------------------------------------------
@dataclass
class Run:
    stepper: Stepper
    lock:    threading.Lock = field(default_factory=threading.Lock)


DEFAULT_CONFIG = {
    "DEFAULT_EDGE_ORDER": "by_weight",
    "DEFAULT_FRONTIER":   "scan",
    "DEFAULT_RELAXATION": "guarded",
    "DEFAULT_GRAPH_SEED": 42,
}

# status code per error family; first match wins
_STATUS = [
    (UnknownVertex,       404),
    (StepAfterCompletion, 409),
    (Unreachable,         409),
    (ConfigError,         400),
    (InputError,          400),
]


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config["SECRET_KEY"] = secrets.token_hex(32)
    if config:
        app.config.from_mapping(config)

    runs: Dict[str, Run] = {}
    app.extensions["dijkstra_runs"] = runs

    # -----------------------------------------------------------------
    # Session helpers
    # -----------------------------------------------------------------
    def get_graph() -> Graph:
        """Deserialise graph from session, or create default."""
        if "graph" not in session:
            g = Graph.generate_random(num_nodes=8, edge_probability=0.3, seed=app.config["DEFAULT_GRAPH_SEED"])
            session["graph"] = g.to_dict()
        return Graph.from_dict(session["graph"])

    def save_graph(graph: Graph) -> None:
        session["graph"] = graph.to_dict()
        # a new graph invalidates the current run
        runs.pop(session.pop("run_id", None), None)

    def get_run() -> Run:
        run = runs.get(session.get("run_id"))
        if run is None:
            raise NoRun()
        return run

    def run_state(run: Run) -> Dict[str, Any]:
        stepper = run.stepper
        engine = stepper.engine
        shown = stepper.displayed_state().to_dict()
        step = stepper.current_step
        shown.update({
            "source":         engine.source,
            "config":         engine.config.to_dict(),
            "current_step":   stepper.current_idx,
            "total_steps":    stepper.total_steps_fetched,
            "step":           step.to_dict() if step else None,
            "stepper_state":  stepper.state.value,
            "engine_phase":   engine.phase.value,
            "has_next_step":  engine.has_next_step() or not stepper.is_at_end,
        })
        return shown

    # -----------------------------------------------------------------
    # Errors
    # -----------------------------------------------------------------
    @app.errorhandler(DijkstraError)
    def handle_dijkstra_error(exc: DijkstraError):
        status = next((code for cls, code in _STATUS if isinstance(exc, cls)), 500)
        if status == 500:
            app.logger.error("engine error: %s", exc)
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), status

    @app.errorhandler(NoRun)
    def handle_no_run(exc):
        return jsonify({"error": "NoRun", "message": "Start a run first"}), 404

    # -----------------------------------------------------------------
    # Algorithm card
    # -----------------------------------------------------------------
    @app.route("/api/algorithm")
    def api_algorithm():
        return jsonify(INFO.to_dict())

    # -----------------------------------------------------------------
    # Graph
    # -----------------------------------------------------------------
    @app.route("/api/graph", methods=["GET"])
    def api_graph_get():
        return jsonify(get_graph().to_dict())

    @app.route("/api/graph", methods=["POST"])
    def api_graph_import():
        data = request.get_json(silent=True) or {}
        if "text" in data:
            g = Graph.from_adjacency_list(data["text"])
        elif "graph" in data:
            g = Graph.from_dict(data["graph"])
        else:
            raise InputError("Body needs 'text' (adjacency list) or 'graph' (dict)")
        save_graph(g)
        app.logger.info("graph imported: %r", g)
        return jsonify({"graph": g.to_dict(), "node_ids": g.node_ids()})

    @app.route("/api/graph/generate", methods=["POST"])
    def api_graph_generate():
        data = request.get_json(silent=True) or {}
        try:
            g = Graph.generate_random(
                num_nodes=int(data.get("nodes", 10)),
                edge_probability=float(data.get("prob", 0.3)),
                weight_range=tuple(data.get("weight_range", (1, 10))),
                seed=data.get("seed"),
            )
        except (TypeError, ValueError) as exc:
            raise InputError(f"Bad generator parameters: {exc}") from exc
        save_graph(g)
        return jsonify({"graph": g.to_dict(), "node_ids": g.node_ids()})

    # -----------------------------------------------------------------
    # Run
    # -----------------------------------------------------------------
    @app.route("/api/run", methods=["POST"])
    def api_run():
        data = request.get_json(silent=True) or {}
        graph = get_graph()
        source = data.get("source")
        if source is None:
            raise InputError("Set 'source' first")

        config = DijkstraConfig.from_dict({
            "edge_order": data.get("edge_order", app.config["DEFAULT_EDGE_ORDER"]),
            "frontier":   data.get("frontier", app.config["DEFAULT_FRONTIER"]),
            "relaxation": data.get("relaxation", app.config["DEFAULT_RELAXATION"]),
        })

        stepper = Stepper()
        stepper.start(StepwiseDijkstra(graph, source, config))

        runs.pop(session.get("run_id"), None)
        run_id = uuid.uuid4().hex
        runs[run_id] = Run(stepper)
        session["run_id"] = run_id
        app.logger.info("run %s started from %r", run_id, source)

        return jsonify({"run_id": run_id, **run_state(runs[run_id])})

    # -----------------------------------------------------------------
    # Step navigation
    # -----------------------------------------------------------------
    @app.route("/api/step/next", methods=["POST"])
    def api_step_next():
        run = get_run()
        with run.lock:
            if not run.stepper.next_step():
                raise StepAfterCompletion("Run is complete; no further steps")
            return jsonify(run_state(run))

    @app.route("/api/step/prev", methods=["POST"])
    def api_step_prev():
        run = get_run()
        with run.lock:
            if not run.stepper.prev_step():
                return jsonify({"error": "AtStart", "message": "Already at the initial state"}), 400
            return jsonify(run_state(run))

    @app.route("/api/step/goto", methods=["POST"])
    def api_step_goto():
        run = get_run()
        data = request.get_json(silent=True) or {}
        try:
            idx = int(data.get("index", -1))
        except (TypeError, ValueError):
            raise InputError("'index' must be an integer") from None
        with run.lock:
            if not run.stepper.goto_step(idx):
                return jsonify({"error": "BadIndex", "message": f"Invalid step index {idx}"}), 400
            return jsonify(run_state(run))

    @app.route("/api/step/play", methods=["POST"])
    def api_step_play():
        run = get_run()
        data = request.get_json(silent=True) or {}
        with run.lock:
            if "speed" in data:
                run.stepper.set_speed(data["speed"])
            run.stepper.toggle_play()
            return jsonify({"is_playing": run.stepper.is_playing, "speed": run.stepper.speed})

    # -----------------------------------------------------------------
    # Observers
    # -----------------------------------------------------------------
    @app.route("/api/state")
    def api_state():
        run = get_run()
        with run.lock:
            return jsonify(run_state(run))

    @app.route("/api/summary")
    def api_summary():
        run = get_run()
        engine = run.stepper.engine
        with run.lock:
            body: Dict[str, Any] = {"summary": engine.summary(), "finished": engine.is_finished}
            vertex = request.args.get("vertex")
            if vertex is not None:
                body["vertex"] = vertex
                body["distance"] = _json_distance(engine.distance_of(vertex))
                body["path"] = engine.path_to(vertex)
            return jsonify(body)

    return app


def _json_distance(d: float) -> Optional[float]:
    return None if d == float("inf") else d


app = create_app()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app.logger.info("Stepwise Dijkstra API on http://localhost:5000")
    app.run(debug=True, port=5000)
