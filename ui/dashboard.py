"""Waiting-room board for the front desk.

A small Flask application that shows both waiting queues and the recent
check-in history. It only reads the snapshot and history files written by
the check-in service; it never changes queue state. Missing files render as
empty queues so the board can run before the first patient arrives.
"""
from __future__ import annotations

import os
from typing import Dict, List, MutableMapping, Optional

from flask import Flask, Response, jsonify, render_template_string, request

from frontdesk import HistoryArchive, SnapshotStore
from frontdesk.config import Settings, load_settings
from frontdesk.models import CheckIn
from frontdesk.state import QueueState

HISTORY_LIMIT = 20


class BoardRepository:
    """Loads board data from the check-in snapshot and history archive."""

    def __init__(self, settings: Settings) -> None:
        self._store = SnapshotStore(settings.snapshot_file)
        self._archive = HistoryArchive(settings.history_file)

    def _waiting(self, state: QueueState, ids: List[int], walk_in: bool) -> List[CheckIn]:
        entries: List[CheckIn] = []
        seen = set()
        for check_in_id in ids:
            check_in = state.check_ins.get(check_in_id)
            if check_in is None or check_in_id in seen:
                continue
            if check_in.walk_in != walk_in or not check_in.is_waiting:
                continue
            seen.add(check_in_id)
            entries.append(check_in)
        return entries

    def get_queues(self) -> Dict[str, List[MutableMapping[str, object]]]:
        state = self._store.load()
        return {
            "walk_in": [
                c.to_dict() for c in self._waiting(state, state.walk_in_queue, walk_in=True)
            ],
            "scheduled": [
                c.to_dict() for c in self._waiting(state, state.scheduled_queue, walk_in=False)
            ],
        }

    def get_history(self, patient_id: Optional[int] = None) -> List[MutableMapping[str, object]]:
        records = self._archive.load_all()
        if patient_id is not None:
            records = [record for record in records if record.patient_id == patient_id]
        return [dict(vars(record)) for record in records]


def parse_patient_id(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


board_template = """
<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\">
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">
    <meta http-equiv=\"refresh\" content=\"15\">
    <title>Front Desk Queue</title>
    <link
      href=\"https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css\"
      rel=\"stylesheet\"
      integrity=\"sha384-QWTKZyjpPEjISv5WaRU9OFeRpok6YctnYmDr5pNlyT2bRjXh0JMhjY6hW+ALEwIH\"
      crossorigin=\"anonymous\"
    >
  </head>
  <body class=\"bg-light\">
    <nav class=\"navbar navbar-dark bg-primary\">
      <div class=\"container-fluid\">
        <span class=\"navbar-brand\">Front Desk Queue</span>
      </div>
    </nav>
    <main class=\"container my-4\">
      <section class=\"row g-4\">
        {% for title, entries, header in panels %}
        <div class=\"col-lg-6\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header {{ header }}\">{{ title }} ({{ entries|length }})</div>
            <div class=\"card-body\">
              {% if entries %}
                <table class=\"table table-sm table-striped\">
                  <thead>
                    <tr>
                      <th scope=\"col\">#</th>
                      <th scope=\"col\">Check-in</th>
                      <th scope=\"col\">Patient</th>
                      <th scope=\"col\">Priority</th>
                      <th scope=\"col\">Arrived</th>
                      <th scope=\"col\">Desk</th>
                    </tr>
                  </thead>
                  <tbody>
                    {% for entry in entries %}
                      <tr>
                        <td>{{ loop.index }}</td>
                        <td>{{ entry.id }}</td>
                        <td>{{ entry.patient_id }}</td>
                        <td>{{ entry.priority if entry.walk_in else '-' }}</td>
                        <td>{{ entry.checked_in_at }}</td>
                        <td>{{ entry.desk or '-' }}</td>
                      </tr>
                    {% endfor %}
                  </tbody>
                </table>
              {% else %}
                <p class=\"text-muted mb-0\">Nobody waiting.</p>
              {% endif %}
            </div>
          </div>
        </div>
        {% endfor %}
      </section>
      <section class=\"mt-5\">
        <div class=\"card shadow-sm\">
          <div class=\"card-header bg-secondary text-white\">Recently Completed</div>
          <div class=\"card-body\">
            {% if history %}
              <table class=\"table table-sm table-striped\">
                <thead>
                  <tr>
                    <th scope=\"col\">Check-in</th>
                    <th scope=\"col\">Patient</th>
                    <th scope=\"col\">Doctor</th>
                    <th scope=\"col\">Arrived</th>
                    <th scope=\"col\">Completed</th>
                  </tr>
                </thead>
                <tbody>
                  {% for record in history %}
                    <tr>
                      <td>{{ record.check_in_id }}</td>
                      <td>{{ record.patient_id }}</td>
                      <td>{{ record.doctor_id or '-' }}</td>
                      <td>{{ record.checked_in_at or '-' }}</td>
                      <td>{{ record.completed_at or '-' }}</td>
                    </tr>
                  {% endfor %}
                </tbody>
              </table>
            {% else %}
              <p class=\"text-muted mb-0\">No completed check-ins yet.</p>
            {% endif %}
          </div>
        </div>
      </section>
    </main>
  </body>
</html>
"""


def create_app(settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    repository = BoardRepository(settings or load_settings())

    @app.route("/api/queue", methods=["GET"])
    def queue() -> Response:
        """Return both waiting queues in service order."""
        return jsonify(repository.get_queues())

    @app.route("/api/history", methods=["GET"])
    def history() -> Response:
        patient_id = parse_patient_id(request.args.get("patient_id"))
        return jsonify(repository.get_history(patient_id))

    @app.route("/board", methods=["GET"])
    def board() -> str:
        queues = repository.get_queues()
        panels = [
            ("Walk-ins", queues["walk_in"], "bg-warning text-dark"),
            ("Scheduled", queues["scheduled"], "bg-success text-white"),
        ]
        history_rows = repository.get_history()[:HISTORY_LIMIT]
        return render_template_string(board_template, panels=panels, history=history_rows)

    return app


if __name__ == "__main__":
    create_app().run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "5000")),
        debug=False,
    )
