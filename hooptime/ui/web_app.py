"""
Web application module for the HoopTime session tracker.

This module contains the Flask server exposing the session engine as JSON API
endpoints. Rendering is left to whatever client consumes the API.
"""
import logging
import os
import threading
from typing import Any, Dict, Optional, Sequence

from flask import Flask, Response, jsonify, request

from ..models import Player, SessionConfig
from ..services import GameSession, ManualTickScheduler, ServiceFactory, SessionPhase
from ..utils import APP_TITLE, format_period_duration, format_seconds, now_ms

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for one web app instance.

    All session mutation happens under ``lock``, which plays the role of the
    single UI event loop: each request runs to completion before the next.
    """

    def __init__(self, factory: ServiceFactory, scheduler: ManualTickScheduler):
        self.factory = factory
        self.scheduler = scheduler
        self.lock = threading.Lock()
        self.history = factory.get_history_service()
        self.history.sync()
        self.session: GameSession = factory.restore_session() or factory.create_session(
            SessionConfig(), []
        )

    def new_session(self, config: SessionConfig, roster: Sequence[Player]) -> GameSession:
        self.session.clock.cancel()
        self.session = self.factory.create_session(config, roster)
        self.session.save()
        return self.session

    def catch_up(self) -> None:
        """Fire the clock's pending tick up to the current wall-clock time."""
        self.scheduler.advance_to(now_ms())


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _session_payload(session: GameSession) -> Dict[str, Any]:
    records = {r.player_id: r for r in session.records()}
    on_court = set(session.on_court_ids)
    players = []
    for player in session.roster:
        record = records.get(player.id)
        players.append({
            **player.to_dict(),
            "on_court": player.id in on_court,
            "total_seconds": record.total_seconds if record else 0,
            "period_seconds": list(record.period_seconds) if record else [],
        })
    return {
        "phase": session.phase.value,
        "config": {
            **session.config.to_dict(),
            "period_display": format_period_duration(
                session.config.period_minutes, session.config.period_seconds
            ),
        },
        "clock": {
            "period": session.current_period,
            "period_label": session.period_label,
            "remaining_seconds": session.remaining_seconds,
            "remaining_display": format_seconds(session.remaining_seconds),
            "is_running": session.is_running,
            "can_start": session.can_start_clock(),
            "has_unspent_time": session.has_unspent_time(),
            "expired_periods": session.periods.expired_periods,
        },
        "on_court_ids": session.on_court_ids,
        "bench_ids": session.bench_ids,
        "players": players,
        "elapsed_seconds": session.elapsed_seconds,
        "is_complete": session.is_complete,
        "archived": session.archiver.archived,
        "analysis": session.analysis,
    }


def create_app(data_dir: Optional[str] = None, factory: Optional[ServiceFactory] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        data_dir: Directory for JSON storage; in-memory when None
        factory: Pre-built service factory (tests inject one)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    if factory is None:
        factory = ServiceFactory(data_dir=data_dir, scheduler=ManualTickScheduler(start_ms=now_ms()))
    scheduler = factory.get_scheduler()
    state = WebAppState(factory, scheduler)
    app.extensions["hooptime"] = state

    def _respond(ok: bool, status_if_rejected: int = 400, error: str = "Request rejected"):
        body = {"success": ok, "state": _session_payload(state.session)}
        if not ok:
            body["error"] = error
            return jsonify(body), status_if_rejected
        return jsonify(body)

    @app.route("/")
    def index():
        return jsonify({"name": APP_TITLE})

    # ==================== Session ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        with state.lock:
            state.catch_up()
            return jsonify({"success": True, "state": _session_payload(state.session)})

    @app.route("/api/session", methods=["POST"])
    def create_session():
        data = _json_body()
        try:
            config = SessionConfig.from_dict(data.get("config"))
        except ValueError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        roster = [Player.from_dict(p) for p in data.get("roster", []) if isinstance(p, dict)]
        with state.lock:
            if state.session.phase in (SessionPhase.LIVE, SessionPhase.COMPLETE):
                return _respond(False, 409, "End the current game before starting a new one")
            state.new_session(config, roster)
            return _respond(True)

    @app.route("/api/config", methods=["POST"])
    def update_config():
        data = _json_body()
        with state.lock:
            session = state.session
            try:
                if session.phase is SessionPhase.SETUP:
                    merged = {**session.config.to_dict(), **data}
                    config = SessionConfig.from_dict(merged)
                    if "period_type" in data and "period_count" not in data:
                        config = config.with_period_type(config.period_type)
                    ok = session.configure(config)
                else:
                    ok = session.update_period_length(
                        int(data.get("period_minutes", session.config.period_minutes)),
                        int(data.get("period_seconds", session.config.period_seconds)),
                    )
            except (TypeError, ValueError) as e:
                return _respond(False, 400, str(e))
            return _respond(ok)

    @app.route("/api/game/start", methods=["POST"])
    def start_game():
        lineup = _json_body().get("lineup", [])
        with state.lock:
            ok = state.session.start_game([str(pid) for pid in lineup])
            return _respond(ok, error="Lineup must be exactly the required number of roster players")

    @app.route("/api/game/end", methods=["POST"])
    def end_game():
        with state.lock:
            state.catch_up()
            record = state.session.end_session(now_ms())
            body = {
                "success": True,
                "record": record.to_dict() if record else None,
                "state": _session_payload(state.session),
            }
            return jsonify(body)

    @app.route("/api/report", methods=["GET"])
    def get_report():
        with state.lock:
            state.catch_up()
            report = state.session.report()
        return jsonify({
            "success": True,
            "elapsed_seconds": report.elapsed_seconds,
            "target_seconds_per_player": report.target_seconds_per_player,
            "fairness_counts": report.fairness_counts,
            "players": [
                {
                    "player_id": s.player_id,
                    "name": s.name,
                    "total_seconds": s.total_seconds,
                    "delta_seconds": s.delta_seconds,
                    "fairness": s.fairness,
                }
                for s in report.players
            ],
        })

    # ==================== Clock ==================== #

    @app.route("/api/clock/start", methods=["POST"])
    def start_clock():
        with state.lock:
            state.catch_up()
            return _respond(state.session.start_clock(now_ms()), error="Clock cannot start now")

    @app.route("/api/clock/stop", methods=["POST"])
    def stop_clock():
        with state.lock:
            state.catch_up()
            return _respond(state.session.stop_clock(now_ms()), error="Clock is not running")

    @app.route("/api/clock/adjust", methods=["POST"])
    def adjust_clock():
        try:
            seconds = int(_json_body().get("seconds", 0))
        except (TypeError, ValueError):
            return jsonify({"success": False, "error": "seconds must be an integer"}), 400
        with state.lock:
            state.catch_up()
            applied = state.session.adjust_clock(seconds)
            if applied == 0:
                return _respond(False, error="Clock can only be adjusted while stopped")
            return jsonify({
                "success": True,
                "applied_seconds": applied,
                "state": _session_payload(state.session),
            })

    # ==================== Substitutions ==================== #

    @app.route("/api/substitute", methods=["POST"])
    def substitute():
        data = _json_body()
        outgoing = [str(pid) for pid in data.get("outgoing", [])]
        incoming = [str(pid) for pid in data.get("incoming", [])]
        with state.lock:
            state.catch_up()
            ok = state.session.substitute(outgoing, incoming, now_ms())
            return _respond(ok, error="Invalid substitution")

    # ==================== Periods ==================== #

    def _change_period(forward: bool):
        confirm = bool(_json_body().get("confirm", False))
        with state.lock:
            state.catch_up()
            session = state.session
            if session.has_unspent_time() and not confirm:
                body = {
                    "success": False,
                    "needs_confirmation": True,
                    "error": "Time remains on the clock",
                    "state": _session_payload(session),
                }
                return jsonify(body), 409
            now = now_ms()
            ok = session.advance_period(now) if forward else session.retreat_period(now)
            return _respond(ok, error="Cannot change period")

    @app.route("/api/period/next", methods=["POST"])
    def next_period():
        return _change_period(True)

    @app.route("/api/period/previous", methods=["POST"])
    def previous_period():
        return _change_period(False)

    # ==================== History ==================== #

    @app.route("/api/history", methods=["GET"])
    def list_history():
        with state.lock:
            records = state.history.entries()
        return jsonify({"success": True, "history": [r.to_dict() for r in records]})

    @app.route("/api/history/sync", methods=["POST"])
    def sync_history():
        with state.lock:
            records = state.history.sync()
        return jsonify({"success": True, "history": [r.to_dict() for r in records]})

    @app.route("/api/history/<record_id>", methods=["GET"])
    def get_history(record_id: str):
        with state.lock:
            record = state.history.get(record_id)
        if record is None:
            return jsonify({"success": False, "error": "Not found"}), 404
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/history/<record_id>", methods=["DELETE"])
    def delete_history(record_id: str):
        with state.lock:
            deleted = state.history.delete(record_id)
        if not deleted:
            return jsonify({"success": False, "error": "Not found"}), 404
        return jsonify({"success": True})

    @app.route("/api/history/<record_id>/csv", methods=["GET"])
    def export_history(record_id: str):
        with state.lock:
            record = state.history.get(record_id)
        if record is None:
            return jsonify({"success": False, "error": "Not found"}), 404
        csv_text = factory.get_exporter().export_to_csv(record)
        return Response(
            csv_text,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=session_{record_id}.csv"},
        )

    return app


def run_web_app(host: Optional[str] = None, port: Optional[int] = None, data_dir: Optional[str] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: HOOPTIME_HOST or localhost only)
        port: Port number to listen on (default: HOOPTIME_PORT or 7122)
        data_dir: Storage directory (default: HOOPTIME_DATA_DIR or ./data)
    """
    host = host or os.environ.get("HOOPTIME_HOST", "127.0.0.1")
    port = port or int(os.environ.get("HOOPTIME_PORT", "7122"))
    data_dir = data_dir or os.environ.get("HOOPTIME_DATA_DIR", "data")
    app = create_app(data_dir=data_dir)
    logger.info("Starting %s on %s:%s (data in %s)", APP_TITLE, host, port, data_dir)
    app.run(host=host, port=port, debug=False)
