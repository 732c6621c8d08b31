from __future__ import annotations

from flask import Flask, request, send_from_directory

from ..common.http import json_body, make_token_required, ok, query_int
from ..container import Container
from ..core.exceptions import NotFoundError
from .storage import LocalFileStore
from ..users.model import CurrentUser


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)
    service = container.resource_service

    @app.route("/api/study-materials", methods=["GET"], endpoint="api_list_materials")
    @token_required
    def api_list_materials(current_user: CurrentUser):
        materials = service.list_materials(current_user, class_id=query_int("class_id"))
        return ok({"materials": [m.to_dict() for m in materials]})

    @app.route("/api/study-materials", methods=["POST"], endpoint="api_create_material")
    @token_required
    def api_create_material(current_user: CurrentUser):
        data = json_body()
        material_id = service.create_material(
            current_user,
            title=data.get("title", ""),
            description=data.get("description"),
            file_type=data.get("file_type"),
            upload=request.files.get("file"),
            class_id=data.get("class_id"),
        )
        return ok({"message": "Study material uploaded successfully", "materialId": material_id}, 201)

    @app.route("/api/notices", methods=["GET"], endpoint="api_list_notices")
    @token_required
    def api_list_notices(current_user: CurrentUser):
        notices = service.list_notices(current_user, class_id=query_int("class_id"))
        return ok({"notices": [n.to_dict() for n in notices]})

    @app.route("/api/notices", methods=["POST"], endpoint="api_create_notice")
    @token_required
    def api_create_notice(current_user: CurrentUser):
        data = json_body()
        notice_id = service.create_notice(
            current_user,
            title=data.get("title", ""),
            content=data.get("content", ""),
            priority=data.get("priority"),
            class_id=data.get("class_id"),
        )
        return ok({"message": "Notice created successfully", "noticeId": notice_id}, 201)

    @app.route("/api/events", methods=["GET"], endpoint="api_list_events")
    @token_required
    def api_list_events(current_user: CurrentUser):
        events = service.list_events(current_user, class_id=query_int("class_id"))
        return ok({"events": [e.to_dict() for e in events]})

    @app.route("/api/events", methods=["POST"], endpoint="api_create_event")
    @token_required
    def api_create_event(current_user: CurrentUser):
        data = json_body()
        event_id = service.create_event(
            current_user,
            title=data.get("title", ""),
            event_date=data.get("event_date"),
            description=data.get("description"),
            event_type=data.get("event_type"),
            event_time=data.get("event_time"),
            class_id=data.get("class_id"),
        )
        return ok({"message": "Event created successfully", "eventId": event_id}, 201)

    @app.route("/api/student-marks", methods=["GET"], endpoint="api_list_marks")
    @token_required
    def api_list_marks(current_user: CurrentUser):
        marks = service.list_marks(
            current_user,
            student_id=query_int("student_id"),
            class_id=query_int("class_id"),
        )
        return ok({"marks": [m.to_dict() for m in marks]})

    @app.route("/api/student-marks", methods=["POST"], endpoint="api_create_mark")
    @token_required
    def api_create_mark(current_user: CurrentUser):
        data = json_body()
        mark_id = service.create_mark(
            current_user,
            student_id=data.get("student_id"),
            subject=data.get("subject", ""),
            exam_type=data.get("exam_type", ""),
            marks_obtained=data.get("marks_obtained"),
            total_marks=data.get("total_marks"),
        )
        return ok({"message": "Marks added successfully", "markId": mark_id}, 201)

    @app.route("/uploads/<path:filename>", methods=["GET"], endpoint="uploaded_file")
    @token_required
    def uploaded_file(current_user: CurrentUser, filename: str):
        store = container.file_store
        if not isinstance(store, LocalFileStore):
            raise NotFoundError("File not found")
        material = service.material_for_file(current_user, filename)
        if not (store.directory / material.file_path).is_file():
            raise NotFoundError("File not found")
        return send_from_directory(store.directory, material.file_path)
