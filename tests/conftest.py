import io
import zipfile

import pytest
from openpyxl import Workbook

from db import Course, get_session, init_db
from main import create_app

HEADER = ("Code", "Name", "National ID", "Grade", "Status")


def build_xlsx(rows, header=HEADER) -> bytes:
    """Serialise rows into an in-memory .xlsx workbook."""
    wb = Workbook()
    ws = wb.active
    if header:
        ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def build_corrupt_xlsx(rows) -> bytes:
    """A real workbook whose first sheet XML is cut in half."""
    src = zipfile.ZipFile(io.BytesIO(build_xlsx(rows)))
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as dst:
        for item in src.infolist():
            data = src.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = data[:len(data) // 2]
            dst.writestr(item, data)
    return buf.getvalue()


def sample_rows(n: int, start: int = 1000):
    """n well-formed rows with unique codes and national ids."""
    return [
        (str(start + i), f"Student {i}", f"290{start + i:011d}", 50 + i % 50, "active")
        for i in range(n)
    ]


@pytest.fixture
def make_xlsx():
    return build_xlsx


@pytest.fixture
def make_corrupt_xlsx():
    return build_corrupt_xlsx


@pytest.fixture
def rows_factory():
    return sample_rows


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite file database per test."""
    init_db(f"sqlite:///{tmp_path / 'test.sqlite'}")
    yield


@pytest.fixture
def course(db):
    session = get_session()
    c = Course(course_name="Mathematics")
    session.add(c)
    session.commit()
    session.close()
    return c


@pytest.fixture
def app(tmp_path):
    app = create_app(f"sqlite:///{tmp_path / 'api.sqlite'}")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()
