"""Web-based dashboard for Pomobar.

A lightweight Flask app serving a single-page dashboard with:
- Countdown, progress bar (click to scrub) and timer controls
- Daily goal progress
- Task list
- Settings editor
"""

import logging
import threading
from typing import Any, Optional

from flask import Flask, jsonify, render_template_string, request

from pomobar.ui.formatter import TextFormatter

logger = logging.getLogger(__name__)

# Will be set by start_dashboard()
_app_ref = None  # type: Optional[Any]  # PomobarApp

TIMER_ACTIONS = ("start", "pause", "toggle", "reset", "skip")


def create_flask_app() -> Flask:
    app = Flask(__name__)
    app.config["SEND_FILE_MAX_AGE_DEFAULT"] = 0

    @app.route("/")
    def index():
        return render_template_string(DASHBOARD_HTML)

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    @app.route("/api/status")
    def api_status():
        if _app_ref is None or _app_ref.timer is None:
            return jsonify({"error": "not initialized"}), 503
        return jsonify(_status_payload())

    @app.route("/api/timer/<action>", methods=["POST"])
    def api_timer_action(action):
        if _app_ref is None or _app_ref.timer is None:
            return jsonify({"error": "not ready"}), 503
        if action not in TIMER_ACTIONS:
            return jsonify({"error": f"unknown action {action!r}"}), 400
        timer = _app_ref.timer
        if action == "start":
            timer.start()
        elif action == "pause":
            timer.pause()
        elif action == "toggle":
            timer.toggle_start_pause()
        elif action == "reset":
            timer.reset()
        else:
            timer.skip()
        return jsonify(_status_payload())

    @app.route("/api/timer/progress", methods=["POST"])
    def api_set_progress():
        if _app_ref is None or _app_ref.timer is None:
            return jsonify({"error": "not ready"}), 503
        data = request.get_json(silent=True) or {}
        try:
            progress = float(data.get("progress"))
        except (TypeError, ValueError):
            return jsonify({"error": "progress must be a number"}), 400
        if progress != progress:  # NaN
            return jsonify({"error": "progress must be a number"}), 400
        _app_ref.timer.set_progress(progress)
        return jsonify(_status_payload())

    @app.route("/api/day/reset", methods=["POST"])
    def api_reset_day():
        if _app_ref is None or _app_ref.timer is None:
            return jsonify({"error": "not ready"}), 503
        _app_ref.timer.reset_day()
        return jsonify(_status_payload())

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @app.route("/api/tasks")
    def api_tasks():
        if not _app_ref or not _app_ref.task_store:
            return jsonify([])
        return jsonify(_tasks_payload())

    @app.route("/api/tasks", methods=["POST"])
    def api_add_task():
        if not _app_ref or not _app_ref.task_store:
            return jsonify({"error": "not ready"}), 503
        data = request.get_json(silent=True) or {}
        text = str(data.get("text", "")).strip()
        if not text:
            return jsonify({"error": "text required"}), 400
        _app_ref.add_task(text)
        return jsonify(_tasks_payload())

    @app.route("/api/tasks/<int:index>/toggle", methods=["POST"])
    def api_toggle_task(index):
        if not _app_ref or not _app_ref.task_store:
            return jsonify({"error": "not ready"}), 503
        if not _app_ref.toggle_task(index):
            return jsonify({"error": "no such task"}), 404
        return jsonify(_tasks_payload())

    @app.route("/api/tasks/<int:index>", methods=["DELETE"])
    def api_delete_task(index):
        if not _app_ref or not _app_ref.task_store:
            return jsonify({"error": "not ready"}), 503
        if not _app_ref.delete_task(index):
            return jsonify({"error": "no such task"}), 404
        return jsonify(_tasks_payload())

    @app.route("/api/tasks/clear-completed", methods=["POST"])
    def api_clear_completed():
        if not _app_ref or not _app_ref.task_store:
            return jsonify({"error": "not ready"}), 503
        _app_ref.clear_completed_tasks()
        return jsonify(_tasks_payload())

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @app.route("/api/settings")
    def api_get_settings():
        if not _app_ref or not _app_ref.settings:
            return jsonify({})
        payload = _app_ref.settings.as_dict()
        payload["languages"] = _app_ref.localizer.available_languages()
        return jsonify(payload)

    @app.route("/api/settings", methods=["POST"])
    def api_save_settings():
        if not _app_ref or not _app_ref.settings:
            return jsonify({"error": "not ready"}), 503
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "invalid"}), 400
        try:
            _app_ref.apply_settings(data)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(_app_ref.settings.as_dict())

    return app


def start_dashboard(app_ref, port: int = 5566) -> threading.Thread:
    """Start the Flask dashboard in a daemon thread."""
    global _app_ref
    _app_ref = app_ref
    flask_app = create_flask_app()

    def _run():
        flask_app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

    t = threading.Thread(target=_run, daemon=True, name="pomobar-web")
    t.start()
    logger.info("Dashboard started at http://127.0.0.1:%d", port)
    return t


def _status_payload() -> dict:
    """Timer snapshot plus the localized labels the page displays."""
    snap = _app_ref.timer.snapshot()
    L = _app_ref.localizer
    return {
        "state": snap.state.value,
        "session_type": snap.session_type.value,
        "session_name": L.session_name(snap.session_type),
        "remaining_seconds": snap.remaining_seconds,
        "duration_seconds": snap.duration_seconds,
        "formatted_time": snap.formatted_time,
        "progress": round(snap.progress, 4),
        "completed_sessions": snap.completed_sessions,
        "daily_goal": snap.daily_goal,
        "goal_reached": snap.goal_reached,
        "labels": {
            "action": TextFormatter.action_label(snap.state, L),
            "reset": L.get("reset"),
            "skip": L.get("skip"),
            "reset_day": L.get("resetDay"),
            "goal": TextFormatter.goal_text(snap.completed_sessions, snap.daily_goal, L),
            "goal_hint": TextFormatter.goal_hint(snap.completed_sessions, snap.daily_goal, L),
            "tasks": L.get("tasks"),
            "new_task": L.get("newTask"),
            "clear_completed": L.get("clearCompleted"),
            "settings": L.get("settings"),
        },
    }


def _tasks_payload() -> list[dict]:
    return [
        {"index": i, "text": t.text, "done": t.done}
        for i, t in enumerate(_app_ref.task_store.list_tasks())
    ]


DASHBOARD_HTML = r"""<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Pomobar</title>
<style>
  body { font-family: -apple-system, "Segoe UI", sans-serif; background: #f5f5f5;
         color: #333; max-width: 360px; margin: 24px auto; }
  .card { background: #fff; border-radius: 10px; padding: 16px; margin-bottom: 12px;
          box-shadow: 0 1px 3px rgba(0,0,0,.08); }
  #session { text-align: center; font-size: 14px; color: #777; }
  #time { text-align: center; font-size: 48px; font-weight: 300; margin: 4px 0 10px; }
  .work { color: #eb5757; } .short_break { color: #4db04f; } .long_break { color: #4078d9; }
  #bar { height: 8px; background: #eee; border-radius: 4px; cursor: pointer; }
  #fill { height: 100%; border-radius: 4px; background: currentColor; width: 0; }
  .row { display: flex; gap: 6px; justify-content: center; margin-top: 12px; }
  button { border: 0; border-radius: 6px; padding: 6px 12px; background: #e8e8e8; cursor: pointer; }
  button.primary { background: #5a7d9a; color: #fff; }
  #goal { text-align: center; font-weight: 600; } #hint { text-align: center; font-size: 12px; color: #777; }
  ul { list-style: none; padding: 0; margin: 8px 0; } li { display: flex; gap: 6px; align-items: center; }
  li.done span { text-decoration: line-through; color: #999; } li span { flex: 1; }
  input[type=text] { flex: 1; padding: 5px; } label { display: flex; justify-content: space-between; margin: 4px 0; }
  input[type=number] { width: 60px; }
</style>
</head>
<body>
<div class="card">
  <div id="session"></div>
  <div id="time">--:--</div>
  <div id="bar"><div id="fill"></div></div>
  <div class="row">
    <button class="primary" id="toggle" onclick="act('toggle')"></button>
    <button id="reset" onclick="act('reset')"></button>
    <button id="skip" onclick="act('skip')"></button>
  </div>
</div>
<div class="card">
  <div id="goal"></div><div id="hint"></div>
  <div class="row"><button id="resetDay" onclick="post('/api/day/reset').then(render)"></button></div>
</div>
<div class="card">
  <strong id="tasksTitle"></strong>
  <ul id="tasks"></ul>
  <div class="row"><input type="text" id="newTask"><button onclick="addTask()">+</button></div>
  <div class="row"><button id="clearDone" onclick="post('/api/tasks/clear-completed').then(renderTasks)"></button></div>
</div>
<div class="card">
  <strong id="settingsTitle"></strong>
  <label>Work <input type="number" id="work_minutes" min="1" max="60"></label>
  <label>Short break <input type="number" id="short_break_minutes" min="1" max="30"></label>
  <label>Long break <input type="number" id="long_break_minutes" min="5" max="45"></label>
  <label>Long break after <input type="number" id="sessions_until_long_break" min="2" max="10"></label>
  <label>Daily goal <input type="number" id="daily_goal" min="1" max="20"></label>
  <label>Language <select id="language"></select></label>
  <div class="row"><button class="primary" onclick="saveSettings()">OK</button></div>
</div>
<script>
const FIELDS = ["work_minutes","short_break_minutes","long_break_minutes","sessions_until_long_break","daily_goal"];
function post(url, body) {
  return fetch(url, {method: "POST", headers: {"Content-Type": "application/json"},
                     body: JSON.stringify(body || {})}).then(r => r.json());
}
function act(action) { post("/api/timer/" + action).then(render); }
function render(s) {
  if (!s || s.error) return;
  document.getElementById("session").textContent = s.session_name;
  const time = document.getElementById("time");
  time.textContent = s.formatted_time; time.className = s.session_type;
  const bar = document.getElementById("bar");
  bar.className = s.session_type;
  document.getElementById("fill").style.width = (s.progress * 100) + "%";
  document.getElementById("toggle").textContent = s.labels.action;
  document.getElementById("reset").textContent = s.labels.reset;
  document.getElementById("skip").textContent = s.labels.skip;
  document.getElementById("resetDay").textContent = s.labels.reset_day;
  document.getElementById("goal").textContent = s.labels.goal;
  document.getElementById("hint").textContent = s.labels.goal_hint;
  document.getElementById("tasksTitle").textContent = s.labels.tasks;
  document.getElementById("newTask").placeholder = s.labels.new_task;
  document.getElementById("clearDone").textContent = s.labels.clear_completed;
  document.getElementById("settingsTitle").textContent = s.labels.settings;
}
function renderTasks(tasks) {
  const ul = document.getElementById("tasks"); ul.innerHTML = "";
  (tasks || []).forEach(t => {
    const li = document.createElement("li"); if (t.done) li.className = "done";
    const cb = document.createElement("input"); cb.type = "checkbox"; cb.checked = t.done;
    cb.onchange = () => post("/api/tasks/" + t.index + "/toggle").then(renderTasks);
    const span = document.createElement("span"); span.textContent = t.text;
    const del = document.createElement("button"); del.textContent = "×";
    del.onclick = () => fetch("/api/tasks/" + t.index, {method: "DELETE"}).then(r => r.json()).then(renderTasks);
    li.append(cb, span, del); ul.appendChild(li);
  });
}
function addTask() {
  const input = document.getElementById("newTask");
  if (!input.value.trim()) return;
  post("/api/tasks", {text: input.value}).then(t => { input.value = ""; renderTasks(t); });
}
function loadSettings() {
  fetch("/api/settings").then(r => r.json()).then(s => {
    FIELDS.forEach(f => document.getElementById(f).value = s[f]);
    const sel = document.getElementById("language"); sel.innerHTML = "";
    Object.entries(s.languages || {}).forEach(([code, name]) => {
      const o = document.createElement("option"); o.value = code; o.textContent = name;
      o.selected = code === s.language; sel.appendChild(o);
    });
  });
}
function saveSettings() {
  const body = {language: document.getElementById("language").value};
  FIELDS.forEach(f => body[f] = parseInt(document.getElementById(f).value, 10));
  post("/api/settings", body).then(() => { loadSettings(); refresh(); });
}
document.getElementById("bar").onclick = e => {
  const rect = e.currentTarget.getBoundingClientRect();
  post("/api/timer/progress", {progress: (e.clientX - rect.left) / rect.width}).then(render);
};
function refresh() { fetch("/api/status").then(r => r.json()).then(render); }
refresh(); loadSettings();
fetch("/api/tasks").then(r => r.json()).then(renderTasks);
setInterval(refresh, 1000);
</script>
</body>
</html>
"""
