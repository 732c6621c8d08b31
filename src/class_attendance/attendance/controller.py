from __future__ import annotations

from flask import Flask

from ..common.http import json_body, make_token_required, ok, query_date, query_int
from ..container import Container
from ..users.model import CurrentUser


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    @token_required
    def api_check_in(current_user: CurrentUser):
        record = service.check_in(current_user)
        return ok({"message": "Check-in successful", "attendanceId": record.attendance_id, "attendance": service.to_view(record)})

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    @token_required
    def api_check_out(current_user: CurrentUser):
        record = service.check_out(current_user)
        return ok({"message": "Check-out successful", "attendance": service.to_view(record)})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @token_required
    def api_attendance_today(current_user: CurrentUser):
        snapshot = service.query_today(current_user)
        return ok(
            {
                "state": snapshot.state.value,
                "attendance": service.to_view(snapshot.record) if snapshot.record else None,
                "hours_worked": snapshot.hours_worked,
            }
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @token_required
    def api_attendance_history(current_user: CurrentUser):
        records = service.history(
            current_user,
            user_id=query_int("user_id"),
            start=query_date("startDate"),
            end=query_date("endDate"),
        )
        return ok({"attendance": [service.to_view(r) for r in records]})

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="api_delete_attendance")
    @token_required
    def api_delete_attendance(current_user: CurrentUser, attendance_id: int):
        service.delete_record(current_user, attendance_id)
        return ok({"message": "Attendance record deleted successfully"})

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="api_admin_attendance")
    @token_required
    def api_admin_attendance(current_user: CurrentUser):
        rows = service.list_all(current_user, start=query_date("startDate"), end=query_date("endDate"))
        return ok({"attendance": [service.row_to_view(r) for r in rows]})

    @app.route("/api/admin/attendance/bulk", methods=["DELETE"], endpoint="api_bulk_delete_attendance")
    @token_required
    def api_bulk_delete_attendance(current_user: CurrentUser):
        deleted = service.bulk_delete(current_user, json_body().get("ids"))
        return ok({"message": f"{deleted} attendance record(s) deleted successfully", "deletedCount": deleted})

    @app.route("/api/classes/<int:class_id>/attendance", methods=["GET"], endpoint="api_class_attendance")
    @token_required
    def api_class_attendance(current_user: CurrentUser, class_id: int):
        rows = service.list_for_class(
            current_user,
            class_id,
            start=query_date("startDate"),
            end=query_date("endDate"),
        )
        return ok({"attendance": [service.row_to_view(r) for r in rows]})
