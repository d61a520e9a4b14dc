"""
Tests for the decision rule endpoints.
"""

import base64
import io

import pytest
from openpyxl import Workbook, load_workbook

from processhub.core.decision import XLSX_MIME_TYPE

pytestmark = pytest.mark.api

CREDIT_RULE = {
    "name": "Credit check",
    "status": "active",
    "associatedBPMNProcesses": ["proc-1"],
    "rules": [
        {
            "name": "large",
            "priority": 2,
            "conditions": [{"field": "amount", "operator": ">", "value": 1000}],
            "actions": [{"type": "set", "value": "manual review"}],
        },
        {
            "name": "any",
            "priority": 1,
            "conditions": [{"field": "amount", "operator": ">", "value": 0}],
            "actions": [{"type": "set", "value": "auto approve"}],
        },
    ],
}


def _xlsx(rows) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestRules:
    """Test rule management."""

    def test_rule_lifecycle(self, client, register) -> None:
        """Rules are created, versioned on update and deleted."""
        register("dana@example.com")

        response = client.post("/api/decision/rules", json=CREDIT_RULE)
        assert response.status_code == 201
        rule = response.json()["rule"]
        assert rule["version"] == 1
        assert rule["createdBy"] == "dana@example.com"
        assert rule["associatedBPMNProcesses"] == ["proc-1"]
        assert all(item["id"] for item in rule["rules"])

        response = client.put(
            "/api/decision/rules", json={"_id": rule["id"], "description": "v2"}
        )
        assert response.status_code == 200
        assert response.json()["rule"]["version"] == 2
        assert response.json()["rule"]["description"] == "v2"

        listed = client.get("/api/decision/rules").json()["rules"]
        assert [r["id"] for r in listed] == [rule["id"]]

        response = client.delete("/api/decision/rules", params={"id": rule["id"]})
        assert response.status_code == 200
        assert client.get("/api/decision/rules").json()["rules"] == []

    def test_rules_are_private(self, client, register) -> None:
        """Other users cannot see or change a rule."""
        register("dana@example.com")
        rule = client.post("/api/decision/rules", json=CREDIT_RULE).json()["rule"]

        register("eve@example.com")
        assert client.get("/api/decision/rules").json()["rules"] == []
        response = client.delete("/api/decision/rules", params={"id": rule["id"]})
        assert response.status_code == 403

    def test_requires_session(self, client) -> None:
        """Test rule routes without a session."""
        assert client.get("/api/decision/rules").status_code == 401


class TestExecute:
    """Test running rules over data."""

    def test_highest_priority_wins(self, client, register) -> None:
        """The best matching rule item decides; unmatched rows say so."""
        register("dana@example.com")
        client.post("/api/decision/rules", json=CREDIT_RULE)
        client.cookies.clear()

        response = client.post(
            "/api/decision/execute",
            json={"data": [{"amount": "5000"}, {"amount": 20}, {"amount": -1}]},
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["finalAction"] for r in results] == [
            "manual review",
            "auto approve",
            "No match",
        ]
        assert [len(r["matchedRules"]) for r in results] == [2, 1, 0]

    def test_no_active_rules(self, client) -> None:
        """Test execution with nothing to run."""
        response = client.post("/api/decision/execute", json={"data": [{"a": 1}]})
        assert response.status_code == 404
        assert response.json()["error"] == "No active rules found"


class TestSpreadsheets:
    """Test spreadsheet import and export."""

    def test_import_xlsx(self, client) -> None:
        """Rows come back keyed by header with inferred column types."""
        content = _xlsx([["Customer", "Amount"], ["Acme", 1200], [None, None]])

        response = client.post(
            "/api/decision/import",
            files={"file": ("loans.xlsx", content, XLSX_MIME_TYPE)},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["rowCount"] == 1
        assert body["data"] == [{"Customer": "Acme", "Amount": "1200"}]
        assert body["columns"] == [
            {"field": "Customer", "type": "string"},
            {"field": "Amount", "type": "number"},
        ]

    def test_import_csv(self, client) -> None:
        """Test a CSV upload."""
        response = client.post(
            "/api/decision/import",
            files={"file": ("loans.csv", b"Customer,Amount\nAcme,1200\n", "text/csv")},
        )
        assert response.status_code == 200
        assert response.json()["rowCount"] == 1

    def test_import_without_file(self, client) -> None:
        """Test the import without an upload."""
        response = client.post("/api/decision/import")
        assert response.status_code == 400
        assert response.json()["error"] == "No file provided"

    def test_export_and_save(self, client, register) -> None:
        """Saved exports can be listed and downloaded again."""
        rows = [{"finalAction": "manual review", "data": {"amount": 5000}}]

        response = client.post(
            "/api/decision/export", json={"data": rows, "save": True}
        )
        assert response.status_code == 401

        response = client.post("/api/decision/export", json={"data": rows})
        assert response.status_code == 200
        workbook = load_workbook(io.BytesIO(base64.b64decode(response.json()["data"])))
        sheet = workbook.active
        assert [c.value for c in sheet[1]] == ["finalAction", "data"]
        assert sheet["B2"].value == '{"amount": 5000}'

        register("dana@example.com")
        response = client.post(
            "/api/decision/export",
            json={"data": rows, "filename": "results.xlsx", "save": True},
        )
        assert response.status_code == 200

        files = client.get("/api/decision/export").json()["files"]
        assert [f["name"] for f in files] == ["results.xlsx"]

        saved = client.get("/api/decision/export", params={"id": files[0]["id"]})
        assert saved.json()["data"] == response.json()["data"]
        assert saved.json()["mimeType"] == XLSX_MIME_TYPE

    def test_trigger_workflow(self, client) -> None:
        """Test starting a workflow from decision results."""
        response = client.post(
            "/api/decision/trigger-workflow",
            json={"bpmnProcessId": "proc-1", "executionResult": [{"finalAction": "x"}]},
        )
        assert response.status_code == 200
        assert response.json()["workflow"]["processId"] == "proc-1"
