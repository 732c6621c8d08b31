from __future__ import annotations

import io
import re

import pytest
from werkzeug.datastructures import FileStorage

from class_attendance.container import assemble_container
from class_attendance.core.exceptions import ValidationError
from class_attendance.main import create_app
from class_attendance.resources.storage import LocalFileStore


def _upload(filename: str, content: bytes = b"hello") -> FileStorage:
    return FileStorage(stream=io.BytesIO(content), filename=filename, name="file")


def test_saves_under_generated_name(tmp_path):
    store = LocalFileStore(tmp_path / "uploads")
    stored = store.save(_upload("Week 1 Notes.PDF"))

    assert stored.extension == "pdf"
    assert re.fullmatch(r"file-\d+-\d+\.pdf", stored.filename)
    assert (tmp_path / "uploads" / stored.filename).read_bytes() == b"hello"


def test_rejects_disallowed_extension(tmp_path):
    store = LocalFileStore(tmp_path)
    with pytest.raises(ValidationError):
        store.save(_upload("payload.exe"))
    with pytest.raises(ValidationError):
        store.save(_upload("no_extension"))
    assert list(tmp_path.iterdir()) == []


def test_oversized_file_is_removed(tmp_path):
    store = LocalFileStore(tmp_path, max_bytes=4)
    with pytest.raises(ValidationError):
        store.save(_upload("big.txt", b"0123456789"))
    assert list(tmp_path.iterdir()) == []


def test_delete_only_touches_the_upload_dir(tmp_path):
    uploads = tmp_path / "uploads"
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")
    store = LocalFileStore(uploads)
    stored = store.save(_upload("a.txt"))

    store.delete(stored.filename)
    store.delete("../keep.txt")
    store.delete("missing.txt")

    assert not (uploads / stored.filename).exists()
    assert outside.exists()


@pytest.fixture
def upload_client(school, tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    container = assemble_container(
        users_repo=school.users,
        classes_repo=school.classes,
        attendance_repo=school.attendance,
        resources_repo=school.resources,
        secret_key="test-secret",
        file_store=LocalFileStore(tmp_path),
        clock=school.clock,
    )
    app = create_app(container)
    app.config["TESTING"] = True
    return app.test_client(), container


def _auth(container, user) -> dict:
    return {"Authorization": f"Bearer {container.token_service.issue(user)}"}


def test_uploaded_file_is_served_within_class_scope(school, upload_client):
    client, container = upload_client
    resp = client.post(
        "/api/study-materials",
        data={"title": "Slides", "file": (io.BytesIO(b"secret"), "a.pdf")},
        content_type="multipart/form-data",
        headers=_auth(container, school.teacher_a),
    )
    assert resp.status_code == 201
    filename = school.resources.materials[0].file_path

    resp = client.get(f"/uploads/{filename}", headers=_auth(container, school.student_a))
    assert resp.status_code == 200
    assert resp.get_data() == b"secret"
    resp.close()

    resp = client.get(f"/uploads/{filename}", headers=_auth(container, school.teacher_b))
    assert resp.status_code == 200
    resp.close()

    assert client.get(f"/uploads/{filename}", headers=_auth(container, school.student_b)).status_code == 403
    assert client.get(f"/uploads/{filename}", headers=_auth(container, school.loner)).status_code == 403
    assert client.get(f"/uploads/{filename}").status_code == 401
    assert client.get("/uploads/unknown.pdf", headers=_auth(container, school.student_a)).status_code == 404


def test_rejected_upload_creates_no_material(school, upload_client):
    client, container = upload_client
    resp = client.post(
        "/api/study-materials",
        data={"title": "Tool", "file": (io.BytesIO(b"MZ"), "tool.exe")},
        content_type="multipart/form-data",
        headers=_auth(container, school.teacher_a),
    )
    assert resp.status_code == 400
    assert school.resources.materials == []
