# Overview: Flask API routes for the cash drawer; parses input and returns JSON responses.

"""
Cash Drawer API Routes

DESIGN:
- Drawer state is read-only over HTTP; it only changes through movements
- Movements are append-only; DELETE reverses the movement's effect
- The counting draft is overwritten wholesale on every PUT
"""

from flask import Blueprint, request, jsonify, current_app

from ..extensions import db
from ..services.cash_ledger import CashLedger, CashError, MovementNotFoundError
from ..services.reconciliation_service import build_reconciliation


cash_bp = Blueprint("cash", __name__, url_prefix="/api/cash")


def _ledger() -> CashLedger:
    return CashLedger(db.session)


def _cash_error(e: CashError):
    status = 404 if isinstance(e, MovementNotFoundError) else 400
    return jsonify({"error": str(e), "details": e.details}), status


@cash_bp.get("/state")
def get_state_route():
    """Current denomination counts and drawer total."""
    return jsonify({"state": _ledger().get_state().to_dict()}), 200


@cash_bp.get("/movements")
def list_movements_route():
    default_limit = current_app.config.get("CASH_MOVEMENTS_DEFAULT_LIMIT", 50)
    limit = request.args.get("limit", default=default_limit, type=int)
    limit = max(1, min(limit, 500))

    movements = _ledger().list_movements(limit=limit)
    return jsonify({"movements": [m.to_dict() for m in movements], "limit": limit}), 200


@cash_bp.get("/movements/<int:movement_id>")
def get_movement_route(movement_id: int):
    movement = _ledger().get_movement(movement_id)
    if not movement:
        return jsonify({"error": "Movement not found"}), 404
    return jsonify({"movement": movement.to_dict()}), 200


@cash_bp.post("/movements")
def apply_movement_route():
    """
    Deposit or withdraw bills/coins.

    Request body:
    {
        "type": "IN",
        "denominations": {"1000": 2, "500": 1},
        "note": "Opening float"  (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        if "type" not in data or "denominations" not in data:
            return jsonify({"error": "type and denominations required"}), 400

        ledger = _ledger()
        movement = ledger.apply_movement(data["type"], data["denominations"], data.get("note"))

        return jsonify({
            "movement": movement.to_dict(),
            "state": ledger.get_state().to_dict(),
        }), 201

    except CashError as e:
        return _cash_error(e)
    except Exception:
        current_app.logger.exception("Failed to apply cash movement")
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.delete("/movements/<int:movement_id>")
def delete_movement_route(movement_id: int):
    """Delete a movement and reverse its effect on the drawer."""
    try:
        ledger = _ledger()
        ledger.delete_movement(movement_id)
        return jsonify({"state": ledger.get_state().to_dict()}), 200

    except CashError as e:
        return _cash_error(e)
    except Exception:
        current_app.logger.exception("Failed to delete cash movement")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# COUNTING DRAFT
# =============================================================================

@cash_bp.get("/draft")
def get_draft_route():
    ledger = _ledger()
    return jsonify({
        "draft": ledger.get_draft(),
        "total_cents": ledger.draft_total_cents(),
    }), 200


@cash_bp.put("/draft")
def set_draft_route():
    """
    Replace the counting draft.

    Request body:
    {"draft": {"1000": "2", "500": ""}}
    """
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data.get("draft"), dict):
            return jsonify({"error": "draft object required"}), 400

        ledger = _ledger()
        draft = ledger.set_draft(data["draft"])
        return jsonify({"draft": draft, "total_cents": ledger.draft_total_cents()}), 200

    except CashError as e:
        return _cash_error(e)
    except Exception:
        current_app.logger.exception("Failed to save counting draft")
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.delete("/draft")
def clear_draft_route():
    try:
        draft = _ledger().clear_draft()
        return jsonify({"draft": draft, "total_cents": 0}), 200
    except Exception:
        current_app.logger.exception("Failed to clear counting draft")
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.post("/draft/commit")
def commit_draft_route():
    """
    Apply the counted draft to the drawer and blank the draft.

    Request body:
    {"type": "IN", "note": "Morning count"}
    """
    try:
        data = request.get_json(silent=True) or {}
        if "type" not in data:
            return jsonify({"error": "type required"}), 400

        ledger = _ledger()
        movement = ledger.commit_draft(data["type"], data.get("note"))
        return jsonify({
            "movement": movement.to_dict(),
            "state": ledger.get_state().to_dict(),
        }), 201

    except CashError as e:
        return _cash_error(e)
    except Exception:
        current_app.logger.exception("Failed to commit counting draft")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# RECONCILIATION
# =============================================================================

@cash_bp.get("/reconciliation")
def reconciliation_route():
    """
    Compare counted/stored cash with sales and withdrawals in a range.

    Query: start_ms, end_ms (epoch milliseconds, inclusive)
    """
    start_ms = request.args.get("start_ms", type=int)
    end_ms = request.args.get("end_ms", type=int)

    if start_ms is None or end_ms is None:
        return jsonify({"error": "start_ms and end_ms required"}), 400
    if start_ms > end_ms:
        return jsonify({"error": "start_ms must be <= end_ms"}), 400

    summary = build_reconciliation(_ledger(), start_ms, end_ms)
    return jsonify({"reconciliation": summary.to_dict()}), 200
