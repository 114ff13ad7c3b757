from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from flask import Flask, jsonify, request, send_from_directory

from game import (
    DEFAULT_HAND_SIZE,
    GameSession,
    Inventory,
    SlotError,
    SqliteCollectionStore,
    default_random_source,
    default_slot_ids,
    generate_palette,
    palette_lookup,
    palette_rows,
    swatch_view,
)

logger = logging.getLogger(__name__)

DEFAULT_DB = os.getenv("CHROMA_DB", "data/collections.db")
HAND_SIZE = int(os.getenv("CHROMA_HAND_SIZE", str(DEFAULT_HAND_SIZE)))

PALETTE = generate_palette()
PALETTE_BY_ID = palette_lookup(PALETTE)

# Replaced in tests with in-memory / seeded collaborators
collection_store = SqliteCollectionStore(DEFAULT_DB)
random_source = default_random_source()

STATIC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "static"))
app = Flask(__name__, static_url_path="/static", static_folder=STATIC_DIR)


# ---------- Static routes ----------

@app.get("/")
def index() -> Any:
    return send_from_directory(app.static_folder, "index.html")


@app.get("/main.js")
def main_js() -> Any:
    resp = send_from_directory(app.static_folder, "main.js")
    resp.headers["Content-Type"] = "application/javascript; charset=utf-8"
    return resp


@app.get("/styles.css")
def styles_css() -> Any:
    resp = send_from_directory(app.static_folder, "styles.css")
    resp.headers["Content-Type"] = "text/css; charset=utf-8"
    return resp


# ---------- State (de)serialization ----------

def state_to_json(session: GameSession) -> Dict[str, Any]:
    inv = session.inventory
    slots: List[Dict[str, Any]] = []
    for sid in session.slot_ids:
        sw = inv.swatch_at(sid)
        slots.append({
            "id": sid,
            "swatch": sw.swatch_id if sw is not None else None,
            "selected": bool(session.selected[sid]),
            "view": swatch_view(sw),
        })
    return {
        "slots": slots,
        "pool": [sw.swatch_id for sw in inv.pool],
        "discarded": [sw.swatch_id for sw in inv.discarded],
        "collected": [sw.swatch_id for sw in inv.collected],
    }


def _swatches(ids: Any) -> list:
    if not isinstance(ids, list):
        raise ValueError("expected a list of swatch ids")
    try:
        return [PALETTE_BY_ID[str(i)] for i in ids]
    except KeyError as e:
        raise ValueError(f"unknown swatch {e.args[0]}") from None


def json_to_state(obj: Dict[str, Any]) -> GameSession:
    """Rebuilds a session from client JSON; raises ValueError if it does not add up."""
    if not isinstance(obj, dict):
        raise ValueError("state must be an object")
    slots = obj.get("slots")
    if not isinstance(slots, list):
        raise ValueError("slots required")
    slot_ids: List[str] = []
    assigned = {}
    selected: List[str] = []
    for s in slots:
        sid = str(s["id"])
        if sid in slot_ids:
            raise ValueError(f"duplicate slot {sid}")
        slot_ids.append(sid)
        if s.get("swatch") is not None:
            assigned[sid] = _swatches([s["swatch"]])[0]
        if s.get("selected"):
            selected.append(sid)
    inventory = Inventory.restore(
        PALETTE,
        pool=_swatches(obj.get("pool", [])),
        assigned=assigned,
        discarded=_swatches(obj.get("discarded", [])),
        collected=_swatches(obj.get("collected", [])),
        source=random_source,
    )
    return GameSession(slot_ids, inventory, collection_store, selected=selected)


def _collections_json() -> List[Dict[str, Any]]:
    return [r.to_json() for r in collection_store.load()]


def _payload(session: GameSession, **extra: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "ok": True,
        "state": state_to_json(session),
        "status": session.status(),
        "canDeclare": session.can_declare(),
    }
    out.update(extra)
    return out


def _session_from_request(body: Dict[str, Any]):
    try:
        return json_to_state(body.get("state")), None
    except (KeyError, TypeError, ValueError) as e:
        logger.info("Rejected client state: %s", e)
        return None, (jsonify({"ok": False, "error": f"bad state: {e}"}), 400)


# ---------- Game API (used by main.js) ----------

@app.get("/api/palette")
def api_palette() -> Any:
    return jsonify({"ok": True, "rows": palette_rows(PALETTE)})


@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        count = int(body.get("cards", HAND_SIZE))
    except (TypeError, ValueError):
        return jsonify({"ok": False, "error": "cards must be an integer"}), 400
    if count < 0 or count > len(PALETTE):
        return jsonify({"ok": False, "error": f"cards must be between 0 and {len(PALETTE)}"}), 400
    session = GameSession.new(default_slot_ids(count), store=collection_store, source=random_source)
    return jsonify(_payload(session, collections=_collections_json()))


@app.post("/api/discard")
def api_discard() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    session, err = _session_from_request(body)
    if err:
        return err
    try:
        result = session.discard(str(body.get("slot")))
    except SlotError as e:
        return jsonify({"ok": False, "error": f"unknown slot {e.args[0]}"}), 400
    extra: Dict[str, Any] = {"drawn": result.ok}
    if not result.ok:
        extra["message"] = "No swatches available"
    return jsonify(_payload(session, **extra))


@app.post("/api/select")
def api_select() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    session, err = _session_from_request(body)
    if err:
        return err
    try:
        session.set_selected(str(body.get("slot")), bool(body.get("selected", True)))
    except SlotError as e:
        return jsonify({"ok": False, "error": f"unknown slot {e.args[0]}"}), 400
    return jsonify(_payload(session))


@app.post("/api/declare")
def api_declare() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    session, err = _session_from_request(body)
    if err:
        return err
    outcome = session.declare()
    if not outcome.ok:
        return jsonify({"ok": False, "error": outcome.message, "canDeclare": False}), 400
    return jsonify(_payload(
        session,
        message=outcome.message,
        matches=[{"name": m.name, "ids": list(m.slot_ids)} for m in outcome.matches],
        added=len(outcome.added),
        collections=_collections_json(),
    ))


@app.get("/api/collections")
def api_collections() -> Any:
    return jsonify({"ok": True, "collections": _collections_json()})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    debug = os.getenv("FLASK_DEBUG", os.getenv("CHROMA_DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO)
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)
