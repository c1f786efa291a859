# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

"""Sales API routes"""

from flask import Blueprint, request, jsonify, current_app

from ..services import sales_service
from ..services.sales_service import SaleError


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _range_args():
    start_ms = request.args.get("start_ms", type=int)
    end_ms = request.args.get("end_ms", type=int)
    if start_ms is None or end_ms is None:
        return None, (jsonify({"error": "start_ms and end_ms required"}), 400)
    return (start_ms, end_ms), None


@sales_bp.post("/")
@sales_bp.post("")
def create_sale_route():
    """
    Record a sale.

    Request body:
    {
        "items": [
            {"product_id": 1, "product_name_snapshot": "Coffee",
             "unit_price_snapshot_cents": 250, "qty": 2}
        ],
        "created_at_ms": 1700000000000  (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        items = data.get("items")

        if not isinstance(items, list) or not items:
            return jsonify({"error": "items required"}), 400

        sale = sales_service.create_sale(items, created_at_ms=data.get("created_at_ms"))

        return jsonify({
            "sale": sale.to_dict(),
            "items": [i.to_dict() for i in sales_service.get_sale_items(sale.id)],
        }), 201

    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/")
@sales_bp.get("")
def list_sales_route():
    bounds, error = _range_args()
    if error:
        return error

    sales = sales_service.list_sales_by_range(*bounds)
    summaries = sales_service.get_sale_items_summary([s.id for s in sales])

    result = []
    for s in sales:
        d = s.to_dict()
        d["items_summary"] = summaries.get(s.id, "")
        result.append(d)

    return jsonify({"sales": result}), 200


@sales_bp.get("/sum")
def sum_sales_route():
    bounds, error = _range_args()
    if error:
        return error
    return jsonify({"total_cents": sales_service.sum_sales_by_range(*bounds)}), 200


@sales_bp.get("/products-sold")
def products_sold_route():
    bounds, error = _range_args()
    if error:
        return error
    return jsonify({"products": sales_service.get_products_sold_summary(*bounds)}), 200


@sales_bp.get("/<int:sale_id>/items")
def get_sale_items_route(sale_id: int):
    sale = sales_service.get_sale(sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify({
        "sale": sale.to_dict(),
        "items": [i.to_dict() for i in sales_service.get_sale_items(sale_id)],
    }), 200


@sales_bp.post("/<int:sale_id>/edits")
def apply_sale_edits_route(sale_id: int):
    """
    Edit or remove sale lines in one transaction.

    Request body:
    {"edits": [{"type": "update", "item_id": 3, "qty": 1}, {"type": "delete", "item_id": 4}]}
    """
    try:
        data = request.get_json(silent=True) or {}
        edits = data.get("edits")
        if not isinstance(edits, list):
            return jsonify({"error": "edits list required"}), 400

        sale = sales_service.apply_sale_edits(sale_id, edits)
        if sale is None:
            return jsonify({"sale": None, "deleted": True}), 200

        return jsonify({
            "sale": sale.to_dict(),
            "items": [i.to_dict() for i in sales_service.get_sale_items(sale_id)],
            "deleted": False,
        }), 200

    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to edit sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<int:sale_id>")
def delete_sale_route(sale_id: int):
    try:
        sales_service.delete_sale(sale_id)
        return jsonify({"deleted": True}), 200
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/draft-total")
def get_draft_total_route():
    return jsonify({"total_cents": sales_service.get_current_sale_draft_total()}), 200


@sales_bp.put("/draft-total")
def set_draft_total_route():
    try:
        data = request.get_json(silent=True) or {}
        sales_service.set_current_sale_draft_total(data.get("total_cents"))
        return jsonify({"total_cents": sales_service.get_current_sale_draft_total()}), 200
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to save sale draft total")
        return jsonify({"error": "Internal server error"}), 500
