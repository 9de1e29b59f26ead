"""
api.routes_courses - course listing and bulk clean-up.
"""

from flask import request, jsonify

from api import api_bp
from api.routes_import import ACTOR_HEADER
from services.course_service import CourseService


@api_bp.route("/courses")
def list_courses():
    """GET /api/v1/courses - ordered by name."""
    return jsonify({"courses": CourseService().list_courses()})


@api_bp.route("/courses/<course_id>/grades", methods=["DELETE"])
def delete_course_grades(course_id: str):
    """DELETE /api/v1/courses/{id}/grades"""
    deleted = CourseService().delete_course_grades(
        request.headers.get(ACTOR_HEADER), course_id,
    )
    return jsonify({"deleted": deleted})


@api_bp.route("/data", methods=["DELETE"])
def purge_all_data():
    """DELETE /api/v1/data - grades, students and courses."""
    counts = CourseService().purge_all(request.headers.get(ACTOR_HEADER))
    return jsonify({"deleted": counts})
