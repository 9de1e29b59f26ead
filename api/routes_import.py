"""
api.routes_import - /api/v1/import endpoints.

Accepts an .xlsx workbook via multipart file upload or raw request body.
The acting administrator is identified by the X-Admin-Code header.
"""

from flask import request, jsonify

from api import api_bp
from api.errors import status_for
from import_engine import preview_import, run_import

ACTOR_HEADER = "X-Admin-Code"


def read_upload() -> bytes:
    """File bytes from the 'xlsx_file' multipart field or the raw body."""
    if request.content_type and "multipart" in request.content_type:
        f = request.files.get("xlsx_file")
        return f.read() if f else b""
    return request.get_data()


@api_bp.route("/import/preview", methods=["POST"])
def api_import_preview():
    """
    POST /api/v1/import/preview

    Validate every row without writing anything.
    """
    content = read_upload()
    if not content:
        return jsonify({"error": "no xlsx_file in upload"}), 400

    report = preview_import(content)
    return jsonify(report.to_dict()), 400 if report.error else 200


@api_bp.route("/import", methods=["POST"])
def api_import_xlsx():
    """
    POST /api/v1/import?course_id=<id>

    Upsert students and the course's grades from the uploaded workbook.
    """
    content = read_upload()
    if not content:
        return jsonify({"error": "no xlsx_file in upload"}), 400

    course_id = request.args.get("course_id", "").strip() or request.form.get("course_id")
    result = run_import(content, course_id, request.headers.get(ACTOR_HEADER))
    return jsonify(result.to_dict()), status_for(result.error)
