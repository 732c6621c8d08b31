from __future__ import annotations

from flask import Flask

from ..common.http import json_body, make_token_required, ok
from ..container import Container
from ..users.model import CurrentUser


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)
    service = container.class_service

    @app.route("/api/class", methods=["GET"], endpoint="api_my_class")
    @token_required
    def api_my_class(current_user: CurrentUser):
        return ok({"class": service.get_my_class(current_user)})

    @app.route("/api/class/students", methods=["GET"], endpoint="api_my_classmates")
    @token_required
    def api_my_classmates(current_user: CurrentUser):
        students = service.list_my_classmates(current_user)
        return ok({"students": [s.to_public_dict() for s in students]})

    @app.route("/api/classes", methods=["GET"], endpoint="api_list_classes")
    @token_required
    def api_list_classes(current_user: CurrentUser):
        return ok({"classes": [c.to_dict() for c in service.list_classes(current_user)]})

    @app.route("/api/classes", methods=["POST"], endpoint="api_create_class")
    @token_required
    def api_create_class(current_user: CurrentUser):
        data = json_body()
        class_id = service.create_class(
            current_user,
            name=data.get("name", ""),
            description=data.get("description"),
            teacher_id=data.get("teacher_id"),
        )
        return ok({"message": "Class created successfully", "classId": class_id}, 201)

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="api_update_class")
    @token_required
    def api_update_class(current_user: CurrentUser, class_id: int):
        data = json_body()
        service.update_class(
            current_user,
            class_id=class_id,
            name=data.get("name", ""),
            description=data.get("description"),
            teacher_id=data.get("teacher_id"),
        )
        return ok({"message": "Class updated successfully"})

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="api_delete_class")
    @token_required
    def api_delete_class(current_user: CurrentUser, class_id: int):
        service.delete_class(current_user, class_id)
        return ok({"message": "Class deleted successfully"})

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="api_class_students")
    @token_required
    def api_class_students(current_user: CurrentUser, class_id: int):
        students = service.list_students(current_user, class_id)
        return ok({"students": [s.to_public_dict() for s in students]})
