from __future__ import annotations

from flask import Flask

from ..common.http import json_body, make_token_required, ok
from ..container import Container
from ..users.model import CurrentUser


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)

    def _auth_payload(user) -> dict:
        return {"token": container.token_service.issue(user), "user": user.to_public_dict()}

    @app.route("/api/register", methods=["POST"], endpoint="api_register")
    def api_register():
        data = json_body()
        user = container.auth_service.register(
            username=data.get("username", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=data.get("role"),
            class_id=data.get("class_id"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            student_code=data.get("student_id"),
        )
        return ok(_auth_payload(user), 201)

    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def api_login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        return ok(_auth_payload(user))

    @app.route("/api/profile", methods=["GET"], endpoint="api_profile")
    @token_required
    def api_profile(current_user: CurrentUser):
        return ok({"user": container.user_service.get_profile(current_user)})

    @app.route("/api/admin/users", methods=["GET"], endpoint="api_admin_users")
    @token_required
    def api_admin_users(current_user: CurrentUser):
        users = container.user_service.list_users(current_user)
        return ok({"users": [u.to_public_dict() for u in users]})

    @app.route("/api/admin/users/<int:user_id>", methods=["DELETE"], endpoint="api_delete_user")
    @token_required
    def api_delete_user(current_user: CurrentUser, user_id: int):
        removed = container.lifecycle.delete_principal(current_user, user_id)
        return ok(
            {
                "message": "User and all associated data deleted successfully",
                "deleted_attendance": removed,
            }
        )
