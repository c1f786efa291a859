# Overview: Flask API routes for withdrawals; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..money import parse_money_to_cents
from ..services import withdrawals_service
from ..services.withdrawals_service import WithdrawalError


withdrawals_bp = Blueprint("withdrawals", __name__, url_prefix="/api/withdrawals")


def _range_args():
    start_ms = request.args.get("start_ms", type=int)
    end_ms = request.args.get("end_ms", type=int)
    if start_ms is None or end_ms is None:
        return None, (jsonify({"error": "start_ms and end_ms required"}), 400)
    return (start_ms, end_ms), None


@withdrawals_bp.post("/")
@withdrawals_bp.post("")
def create_withdrawal_route():
    """
    Record a withdrawal.

    Request body (either amount form):
    {
        "amount": "$1,250.50",      (text as typed, parsed to cents)
        "amount_cents": 125050,
        "reason": "Supplier payment"  (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        if "amount_cents" in data:
            amount_cents = data["amount_cents"]
        elif "amount" in data:
            amount_cents = parse_money_to_cents(data["amount"])
        else:
            return jsonify({"error": "amount or amount_cents required"}), 400

        withdrawal = withdrawals_service.create_withdrawal(
            amount_cents,
            reason=data.get("reason"),
            created_at_ms=data.get("created_at_ms"),
        )
        return jsonify({"withdrawal": withdrawal.to_dict()}), 201

    except WithdrawalError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create withdrawal")
        return jsonify({"error": "Internal server error"}), 500


@withdrawals_bp.get("/")
@withdrawals_bp.get("")
def list_withdrawals_route():
    bounds, error = _range_args()
    if error:
        return error
    rows = withdrawals_service.list_withdrawals_by_range(*bounds)
    return jsonify({"withdrawals": [w.to_dict() for w in rows]}), 200


@withdrawals_bp.get("/sum")
def sum_withdrawals_route():
    bounds, error = _range_args()
    if error:
        return error
    return jsonify({"total_cents": withdrawals_service.sum_withdrawals_by_range(*bounds)}), 200


@withdrawals_bp.delete("/<int:withdrawal_id>")
def delete_withdrawal_route(withdrawal_id: int):
    try:
        withdrawals_service.delete_withdrawal(withdrawal_id)
        return jsonify({"deleted": True}), 200
    except WithdrawalError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except Exception:
        current_app.logger.exception("Failed to delete withdrawal")
        return jsonify({"error": "Internal server error"}), 500
