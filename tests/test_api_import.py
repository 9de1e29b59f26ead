import io

import pytest

from db import Course, get_session

ADMIN = {"X-Admin-Code": "admin01"}


@pytest.fixture
def course_id(app):
    session = get_session()
    c = Course(course_name="Physics")
    session.add(c)
    session.commit()
    session.close()
    return c.id


def _upload(content):
    return {"xlsx_file": (io.BytesIO(content), "grades.xlsx")}


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_list_courses(client, course_id):
    data = client.get("/api/v1/courses").get_json()
    assert data["courses"] == [{"id": course_id, "course_name": "Physics"}]


def test_preview_endpoint(client, make_xlsx):
    content = make_xlsx([("1001", "Ahmed", "290", 27, "active"),
                         ("1001", "Sara", "291", 20, "active")])

    resp = client.post("/api/v1/import/preview", data=_upload(content),
                       content_type="multipart/form-data")

    assert resp.status_code == 200
    assert resp.get_json()["invalid_rows"] == 1


def test_import_multipart(client, course_id, make_xlsx, rows_factory):
    resp = client.post(f"/api/v1/import?course_id={course_id}",
                       data=_upload(make_xlsx(rows_factory(5))),
                       content_type="multipart/form-data", headers=ADMIN)

    body = resp.get_json()
    assert resp.status_code == 200, body
    assert body["ok"] is True
    assert body["grades_upserted"] == 5


def test_import_raw_body(client, course_id, make_xlsx, rows_factory):
    resp = client.post(f"/api/v1/import?course_id={course_id}",
                       data=make_xlsx(rows_factory(2)), headers=ADMIN,
                       content_type="application/octet-stream")
    assert resp.status_code == 200


def test_import_validation_failure_is_422(client, course_id, make_xlsx):
    resp = client.post(f"/api/v1/import?course_id={course_id}",
                       data=_upload(make_xlsx([("1002", "Sara", "", 20, "active")])),
                       content_type="multipart/form-data", headers=ADMIN)

    assert resp.status_code == 422
    assert resp.get_json()["reasons"] == ["Row 2: national id missing"]


def test_import_without_actor_is_400(client, course_id, make_xlsx, rows_factory):
    resp = client.post(f"/api/v1/import?course_id={course_id}",
                       data=_upload(make_xlsx(rows_factory(1))),
                       content_type="multipart/form-data")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "precondition"


def test_import_without_file_is_400(client, course_id):
    resp = client.post(f"/api/v1/import?course_id={course_id}", data={},
                       content_type="multipart/form-data", headers=ADMIN)
    assert resp.status_code == 400


def test_delete_course_grades_endpoint(client, course_id, make_xlsx, rows_factory):
    client.post(f"/api/v1/import?course_id={course_id}",
                data=_upload(make_xlsx(rows_factory(3))),
                content_type="multipart/form-data", headers=ADMIN)

    resp = client.delete(f"/api/v1/courses/{course_id}/grades", headers=ADMIN)

    assert resp.get_json() == {"deleted": 3}


def test_purge_requires_actor(client):
    resp = client.delete("/api/v1/data")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "precondition"


def test_purge_endpoint(client, course_id):
    resp = client.delete("/api/v1/data", headers=ADMIN)
    assert resp.get_json()["deleted"]["courses"] == 1
