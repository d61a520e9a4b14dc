"""
Tests for the BPMN tree endpoints and the admin file endpoints.
"""

import io
import zipfile

import pytest

pytestmark = pytest.mark.api

DIAGRAM = '<bpmn:definitions id="d1"><bpmn:process id="p1"/></bpmn:definitions>'


def _create(client, user_id, **fields):
    response = client.post("/api/bpmn-nodes", json={"userId": user_id, **fields})
    assert response.status_code == 200, response.text
    return response.json()["node"]


class TestBpmnTree:
    """Test a user's folder and file tree."""

    def test_build_and_read_tree(self, client, register) -> None:
        """Files nest under their folders with default details."""
        user = register("uma@example.com", name="Uma")
        folder = _create(client, user["id"], type="folder", name="Finance")
        diagram = _create(
            client,
            user["id"],
            type="file",
            name="Invoice",
            parentId=folder["id"],
            content=DIAGRAM,
        )

        assert diagram["advancedDetails"]["versionNo"] == "1.0.0"
        assert diagram["advancedDetails"]["createdBy"] == "Uma"

        response = client.get("/api/bpmn-nodes", params={"userId": user["id"]})
        assert response.status_code == 200
        tree = response.json()["tree"]
        assert [n["name"] for n in tree] == ["Finance"]
        assert tree[0]["children"][0]["id"] == diagram["id"]
        assert tree[0]["children"][0]["content"] == DIAGRAM

        response = client.get(
            "/api/bpmn-nodes", params={"userId": user["id"], "nodeId": folder["id"]}
        )
        assert response.json()["node"]["children"] == [diagram["id"]]

    def test_update_bumps_version(self, client, register) -> None:
        """Saving advanced details increments the patch number."""
        user = register("vic@example.com")
        diagram = _create(client, user["id"], type="file", name="A", content=DIAGRAM)

        response = client.put(
            "/api/bpmn-nodes",
            json={
                "nodeId": diagram["id"],
                "userId": user["id"],
                "advancedDetails": {"processStatus": "Draft"},
            },
        )

        assert response.status_code == 200
        details = response.json()["node"]["advancedDetails"]
        assert details["versionNo"] == "1.0.1"
        assert details["processStatus"] == "Draft"

    def test_move_folder_into_itself(self, client, register) -> None:
        """A folder cannot become its own descendant."""
        user = register("wes@example.com")
        outer = _create(client, user["id"], type="folder", name="Outer")
        inner = _create(
            client, user["id"], type="folder", name="Inner", parentId=outer["id"]
        )

        response = client.put(
            "/api/bpmn-nodes",
            json={"nodeId": outer["id"], "userId": user["id"], "parentId": inner["id"]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot move a folder into itself"

    def test_delete_folder_removes_contents(self, client, register) -> None:
        """Deleting a folder removes everything below it."""
        user = register("xena@example.com")
        folder = _create(client, user["id"], type="folder", name="Old")
        _create(
            client,
            user["id"],
            type="file",
            name="Gone",
            parentId=folder["id"],
            content=DIAGRAM,
        )

        response = client.delete(
            "/api/bpmn-nodes", params={"nodeId": folder["id"], "userId": user["id"]}
        )

        assert response.status_code == 200
        tree = client.get("/api/bpmn-nodes", params={"userId": user["id"]}).json()
        assert tree["tree"] == []

    def test_validation(self, client, register) -> None:
        """Test missing content and parents that are files."""
        user = register("yan@example.com")

        response = client.post(
            "/api/bpmn-nodes", json={"userId": user["id"], "type": "file", "name": "x"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "content is required for files"

        diagram = _create(client, user["id"], type="file", name="F", content=DIAGRAM)
        response = client.post(
            "/api/bpmn-nodes",
            json={
                "userId": user["id"],
                "type": "folder",
                "name": "Sub",
                "parentId": diagram["id"],
            },
        )
        assert response.status_code == 400

        response = client.get("/api/bpmn-nodes")
        assert response.status_code == 400

    def test_other_users_tree_is_forbidden(self, client, register) -> None:
        """Only owners and admins reach a tree."""
        owner = register("zoe@example.com")
        _create(client, owner["id"], type="folder", name="Private")

        register("adam@example.com")
        response = client.get("/api/bpmn-nodes", params={"userId": owner["id"]})
        assert response.status_code == 403

        register("root@example.com", role="admin")
        response = client.get("/api/bpmn-nodes", params={"userId": owner["id"]})
        assert response.status_code == 200
        assert response.json()["tree"][0]["name"] == "Private"


class TestAdminFiles:
    """Test admin file management."""

    @pytest.fixture
    def files(self, client, register):
        """Create a folder with two diagrams and sign in as an admin."""
        user = register("owner@example.com")
        folder = _create(client, user["id"], type="folder", name="Ops")
        first = _create(
            client,
            user["id"],
            type="file",
            name="Intake",
            parentId=folder["id"],
            content=DIAGRAM,
        )
        second = _create(client, user["id"], type="file", name="Intake", content="<b/>")
        register("admin@example.com", role="admin")
        return {"user": user, "folder": folder, "first": first, "second": second}

    def test_requires_admin(self, client, register) -> None:
        """Non-admins are turned away."""
        register("user@example.com")
        response = client.get("/api/admin/bpmn-files")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_list_with_paths(self, client, files) -> None:
        """Every file is listed with its folder path."""
        response = client.get("/api/admin/bpmn-files")

        assert response.status_code == 200
        paths = {f["id"]: f["path"] for f in response.json()["files"]}
        assert paths[files["first"]["id"]] == "Ops/Intake"
        assert paths[files["second"]["id"]] == "Intake"

        tree = client.get("/api/admin/bpmn-files", params={"format": "tree"}).json()
        roots = {n["name"]: n for n in tree["tree"]}
        assert roots["Ops"]["children"][0]["userId"] == files["user"]["id"]

    def test_archive_cycle(self, client, files) -> None:
        """Archived files appear in the archive until unarchived."""
        file_id = files["first"]["id"]

        response = client.patch(
            f"/api/admin/bpmn-files/{file_id}", json={"archived": True, "name": 7}
        )
        assert response.status_code == 200
        assert response.json()["file"]["archived"] is True
        assert response.json()["file"]["name"] == "Intake"

        archived = client.get("/api/admin/bpmn-files/archived").json()["files"]
        assert [f["id"] for f in archived] == [file_id]

        client.patch(f"/api/admin/bpmn-files/{file_id}", json={"archived": False})
        archived = client.get("/api/admin/bpmn-files/archived").json()["files"]
        assert archived == []

    def test_export_zip(self, client, files) -> None:
        """Duplicate names are told apart by id."""
        ids = f"{files['first']['id']},{files['second']['id']}"

        response = client.get("/api/admin/bpmn-files/export", params={"ids": ids})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        names = zipfile.ZipFile(io.BytesIO(response.content)).namelist()
        assert len(names) == 2
        assert "Intake.bpmn.xml" in names

        response = client.get("/api/admin/bpmn-files/export")
        assert response.status_code == 400

    def test_get_and_delete(self, client, files) -> None:
        """A deleted file is gone and its folder forgets it."""
        file_id = files["first"]["id"]
        assert client.get(f"/api/admin/bpmn-files/{file_id}").json()["file"][
            "content"
        ] == DIAGRAM

        assert client.delete(f"/api/admin/bpmn-files/{file_id}").status_code == 200
        assert client.get(f"/api/admin/bpmn-files/{file_id}").status_code == 404

        folder = client.get(
            "/api/bpmn-nodes",
            params={"userId": files["user"]["id"], "nodeId": files["folder"]["id"]},
        ).json()["node"]
        assert folder["children"] == []

    def test_seed_standards(self, client, files) -> None:
        """Seeding replaces the public standards list."""
        response = client.post("/api/admin/seed-standards")
        assert response.status_code == 200
        seeded = response.json()["standards"]

        public = client.get("/api/standards").json()["standards"]
        assert len(public) == len(seeded) > 0
