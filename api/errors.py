"""
api.errors - JSON error handlers for the API blueprint.
"""

from flask import jsonify

from api import api_bp
from errors import IngestError

# IngestError.kind → HTTP status
STATUS_BY_KIND = {
    "format": 400,
    "precondition": 400,
    "in_progress": 409,
    "validation": 422,
    "store": 502,
}


def status_for(kind: str | None) -> int:
    if kind is None:
        return 200
    return STATUS_BY_KIND.get(kind, 500)


@api_bp.errorhandler(IngestError)
def api_ingest_error(e: IngestError):
    return jsonify({"error": e.kind, "message": str(e)}), status_for(e.kind)


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"error": "not found"}), 404


@api_bp.errorhandler(400)
def api_bad_request(_e):
    return jsonify({"error": "bad request"}), 400


@api_bp.errorhandler(413)
def api_too_large(_e):
    return jsonify({"error": "upload too large"}), 413


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"error": "internal server error"}), 500
