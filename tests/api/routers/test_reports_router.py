"""Tests for reports router."""

from io import BytesIO

from openpyxl import load_workbook
from sqlalchemy.exc import OperationalError

from loss_reports.exceptions import ResourceNotFoundError, StorageUnavailableError, ValidationError
from loss_reports.services.export_service import EXPORT_COLUMNS, project_reports

VALID_BODY = {
    "manager": "Ivan",
    "restaurant": "01 — Astana",
    "reason": "spill",
    "amount": "1500.7",
    "start": "07.01.2026 10:00",
    "end": "07.01.2026 11:00",
}


class TestListReports:
    """Tests for GET /api/v1/reports endpoint."""

    def test_list_reports_empty(self, client, mock_report_service):
        response = client.get("/api/v1/reports")

        assert response.status_code == 200
        assert response.json() == {"reports": [], "total": 0}

    def test_list_reports_serializes_rows(self, client, mock_report_service, make_report):
        mock_report_service.list_reports.return_value = [make_report(id=2), make_report(id=1)]

        response = client.get("/api/v1/reports")

        data = response.json()
        assert data["total"] == 2
        assert [r["id"] for r in data["reports"]] == [2, 1]
        assert data["reports"][0]["created_at"] == 1767780000000
        assert data["reports"][0]["request_identity"] == "identity-1"

    def test_list_storage_unavailable(self, client, mock_report_service):
        mock_report_service.list_reports.side_effect = StorageUnavailableError()

        response = client.get("/api/v1/reports")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        assert response.json()["error"]["code"] == "STORAGE_UNAVAILABLE"


class TestCreateReport:
    """Tests for POST /api/v1/reports endpoint."""

    def test_create_returns_report(self, client, mock_report_service, make_report):
        mock_report_service.create_report.return_value = make_report(id=11)

        response = client.post("/api/v1/reports", json=VALID_BODY)

        assert response.status_code == 200
        assert response.json()["id"] == 11
        payload = mock_report_service.create_report.call_args.args[0]
        assert payload.amount == "1500.7"
        assert mock_report_service.create_report.call_args.kwargs["explicit_identity"] is None

    def test_create_uses_idempotency_key_header(self, client, mock_report_service, make_report):
        mock_report_service.create_report.return_value = make_report()

        client.post("/api/v1/reports", json=VALID_BODY, headers={"Idempotency-Key": "tap-7"})

        assert mock_report_service.create_report.call_args.kwargs["explicit_identity"] == "tap-7"

    def test_body_request_id_wins_over_header(self, client, mock_report_service, make_report):
        mock_report_service.create_report.return_value = make_report()

        client.post(
            "/api/v1/reports",
            json={**VALID_BODY, "request_id": "body-key"},
            headers={"Idempotency-Key": "header-key"},
        )

        assert mock_report_service.create_report.call_args.kwargs["explicit_identity"] == "body-key"

    def test_blank_body_request_id_falls_back_to_header(
        self, client, mock_report_service, make_report
    ):
        mock_report_service.create_report.return_value = make_report()

        client.post(
            "/api/v1/reports",
            json={**VALID_BODY, "request_id": "   "},
            headers={"Idempotency-Key": "header-key"},
        )

        assert mock_report_service.create_report.call_args.kwargs["explicit_identity"] == "header-key"

    def test_overlong_body_request_id_reaches_service(self, client, mock_report_service):
        mock_report_service.create_report.side_effect = ValidationError(
            "request identity too long", details={"max_length": 128}
        )

        response = client.post("/api/v1/reports", json={**VALID_BODY, "request_id": "k" * 200})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert mock_report_service.create_report.call_args.kwargs["explicit_identity"] == "k" * 200

    def test_create_validation_error(self, client, mock_report_service):
        mock_report_service.create_report.side_effect = ValidationError("amount must be positive")

        response = client.post("/api/v1/reports", json={**VALID_BODY, "amount": "-1"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "amount must be positive"

    def test_create_rejects_non_object_body(self, client, mock_report_service):
        response = client.post("/api/v1/reports", json=["not", "an", "object"])

        assert response.status_code == 422
        mock_report_service.create_report.assert_not_called()

    def test_unclassified_database_error(self, client, mock_report_service):
        mock_report_service.create_report.side_effect = OperationalError("x", {}, Exception("y"))

        response = client.post("/api/v1/reports", json=VALID_BODY)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "DATABASE_ERROR"


class TestUpdateReport:
    """Tests for PUT /api/v1/reports/{report_id} endpoint."""

    def test_update_returns_report(self, client, mock_report_service, make_report):
        mock_report_service.update_report.return_value = make_report(id=3, manager="Oleg")

        response = client.put("/api/v1/reports/3", json={**VALID_BODY, "manager": "Oleg"})

        assert response.status_code == 200
        assert response.json()["manager"] == "Oleg"
        assert mock_report_service.update_report.call_args.args[0] == 3

    def test_update_not_found(self, client, mock_report_service):
        mock_report_service.update_report.side_effect = ResourceNotFoundError("Report", "3")

        response = client.put("/api/v1/reports/3", json=VALID_BODY)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_update_bad_id(self, client, mock_report_service):
        response = client.put("/api/v1/reports/abc", json=VALID_BODY)

        assert response.status_code == 422


class TestDeleteReport:
    """Tests for DELETE /api/v1/reports/{report_id} endpoint."""

    def test_delete_returns_no_content(self, client, mock_report_service):
        response = client.delete("/api/v1/reports/99")

        assert response.status_code == 204
        mock_report_service.delete_report.assert_awaited_once_with(99)


class TestExportReports:
    """Tests for GET /api/v1/reports/export.xlsx endpoint."""

    def test_export_returns_workbook(self, client, mock_report_service, make_report):
        mock_report_service.export_rows.return_value = project_reports([make_report()])

        response = client.get("/api/v1/reports/export.xlsx")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert 'filename="' in response.headers["content-disposition"]
        assert response.headers["content-disposition"].endswith('.xlsx"')
        sheet = load_workbook(BytesIO(response.content)).active
        rows = list(sheet.iter_rows(values_only=True))
        assert rows[0] == EXPORT_COLUMNS
        assert rows[1][8] == 1.0

    def test_export_storage_unavailable(self, client, mock_report_service):
        mock_report_service.export_rows.side_effect = StorageUnavailableError()

        response = client.get("/api/v1/reports/export.xlsx")

        assert response.status_code == 503
