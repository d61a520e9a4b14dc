"""
Unit tests for the BPMN node and admin file services.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from processhub.core.database.tortoise_schemas import (
    BpmnFilePatchRequest,
    BpmnNodeWriteRequest,
    SessionUser,
)
from processhub.core.errors import BadRequestError, ForbiddenError, NotFoundError
from processhub.core.models.tortoise_models import NodeType
from processhub.core.repositories.bpmn_repository import (
    BpmnArchivedNodeRepository,
    BpmnNodeRepository,
)
from processhub.core.repositories.kpi_repository import KPIRepository
from processhub.core.repositories.user_repository import UserRepository
from processhub.core.services.bpmn_service import AdminBpmnService, BpmnNodeService

USER_ID = "user-1"
ADMIN = SessionUser(user_id="admin-1", email="root@example.com", role="admin")


def _node(name, node_type=NodeType.FOLDER, parent=None, **extra):
    values = {
        "id": uuid4(),
        "user_id": USER_ID,
        "owner_user_id": "",
        "name": name,
        "type": node_type,
        "parent_id": str(parent.id) if parent is not None else None,
        "children": [],
        "content": None,
        "process_metadata": None,
        "advanced_details": None,
        "sign_off_data": None,
        "history_data": None,
        "trigger_data": None,
        "selected_standards": None,
        "selected_kpis": None,
        "archived": False,
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
    }
    values.update(extra)
    return SimpleNamespace(**values)


def _apply(node, **changes):
    node.__dict__.update(changes)
    return node


@pytest.fixture
def mock_node_repository():
    """Create a mock node repository."""
    repository = AsyncMock(spec=BpmnNodeRepository)
    repository.update.side_effect = _apply
    return repository


@pytest.fixture
def mock_kpi_repository():
    """Create a mock KPI repository."""
    return AsyncMock(spec=KPIRepository)


@pytest.fixture
def mock_user_repository():
    """Create a mock user repository."""
    repository = AsyncMock(spec=UserRepository)
    repository.get_by_id.return_value = SimpleNamespace(
        name="Alice", email="alice@example.com"
    )
    return repository


@pytest.fixture
def service(mock_node_repository, mock_kpi_repository, mock_user_repository):
    """Create a node service instance."""
    return BpmnNodeService(
        mock_node_repository, mock_kpi_repository, mock_user_repository
    )


class TestAccess:
    """Test tree ownership checks."""

    def test_owner_and_admin_allowed(self) -> None:
        """Owners and admins may work on a tree."""
        owner = SessionUser(user_id=USER_ID, email="a@example.com")
        BpmnNodeService.check_access(owner, USER_ID)
        BpmnNodeService.check_access(ADMIN, USER_ID)

    def test_other_user_denied(self) -> None:
        """Other users get a 403."""
        other = SessionUser(user_id="user-2", email="b@example.com", role="supervisor")
        with pytest.raises(ForbiddenError, match="Access denied"):
            BpmnNodeService.check_access(other, USER_ID)


class TestCreateNode:
    """Test node creation."""

    @pytest.mark.asyncio
    async def test_create_file_with_defaults(
        self, service, mock_node_repository, mock_kpi_repository
    ):
        """Files get default details and are linked to their folder."""
        folder = _node("Finance")
        mock_node_repository.get_user_node.return_value = folder
        mock_node_repository.create.side_effect = lambda **values: _node(
            values.pop("name"), values.pop("type"), **values
        )

        result = await service.create_node(
            BpmnNodeWriteRequest(
                userId=USER_ID,
                type="file",
                name="Invoice",
                parentId=str(folder.id),
                content="<xml/>",
                selectedKPIs=["k1"],
            )
        )

        values = mock_node_repository.create.call_args.kwargs
        assert values["advanced_details"]["versionNo"] == "1.0.0"
        assert values["advanced_details"]["createdBy"] == "Alice"
        assert values["sign_off_data"]["signature"] == ""
        assert values["trigger_data"] == {"triggers": "", "inputs": "", "outputs": ""}
        mock_node_repository.add_child.assert_called_once_with(folder, result["id"])
        mock_kpi_repository.add_process.assert_called_once_with(["k1"], result["id"])
        assert result["type"] == "file"
        assert result["parentId"] == str(folder.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"userId": USER_ID, "type": "file"}, "are required"),
            ({"userId": USER_ID, "type": "diagram", "name": "x"}, "folder or file"),
            ({"userId": USER_ID, "type": "file", "name": "x"}, "content is required"),
        ],
    )
    async def test_create_validation(self, service, payload, message):
        """Test required fields and node types."""
        with pytest.raises(BadRequestError, match=message):
            await service.create_node(BpmnNodeWriteRequest(**payload))

    @pytest.mark.asyncio
    async def test_parent_must_be_folder(self, service, mock_node_repository):
        """Files cannot contain other nodes."""
        mock_node_repository.get_user_node.return_value = _node("f", NodeType.FILE)
        with pytest.raises(BadRequestError, match="Parent must be a folder"):
            await service.create_node(
                BpmnNodeWriteRequest(
                    userId=USER_ID, type="folder", name="Sub", parentId="p"
                )
            )

        mock_node_repository.get_user_node.return_value = None
        with pytest.raises(NotFoundError, match="Parent node not found"):
            await service.create_node(
                BpmnNodeWriteRequest(
                    userId=USER_ID, type="folder", name="Sub", parentId="p"
                )
            )


class TestUpdateNode:
    """Test node updates."""

    @pytest.mark.asyncio
    async def test_advanced_details_bump_version(self, service, mock_node_repository):
        """New details increment the patch number."""
        node = _node(
            "Invoice", NodeType.FILE, advanced_details={"versionNo": "1.2.9"}
        )
        mock_node_repository.get_user_node.return_value = node

        result = await service.update_node(
            BpmnNodeWriteRequest(
                nodeId=str(node.id),
                userId=USER_ID,
                advancedDetails={"versionNo": "9.9.9", "processStatus": "Draft"},
            )
        )

        details = result["advancedDetails"]
        assert details["versionNo"] == "1.2.10"
        assert details["processStatus"] == "Draft"
        assert details["modificationDate"]

    @pytest.mark.asyncio
    async def test_only_sent_fields_change(self, service, mock_node_repository):
        """Fields missing from the request are left alone."""
        node = _node("Invoice", NodeType.FILE, content="<old/>")
        mock_node_repository.get_user_node.return_value = node

        await service.update_node(
            BpmnNodeWriteRequest(nodeId=str(node.id), userId=USER_ID, name="Renamed")
        )

        mock_node_repository.update.assert_called_once_with(node, name="Renamed")

    @pytest.mark.asyncio
    async def test_cannot_move_into_descendant(self, service, mock_node_repository):
        """A folder cannot be moved below itself."""
        root = _node("Root")
        child = _node("Child", parent=root)
        mock_node_repository.get_user_node.return_value = root
        mock_node_repository.get_user_nodes.return_value = [root, child]

        with pytest.raises(BadRequestError, match="into itself"):
            await service.update_node(
                BpmnNodeWriteRequest(
                    nodeId=str(root.id), userId=USER_ID, parentId=str(child.id)
                )
            )

    @pytest.mark.asyncio
    async def test_kpi_associations_follow_selection(
        self, service, mock_node_repository, mock_kpi_repository
    ):
        """Added and removed KPIs are synced."""
        node = _node("Invoice", NodeType.FILE, selected_kpis=["k1", "k2"])
        mock_node_repository.get_user_node.return_value = node

        await service.update_node(
            BpmnNodeWriteRequest(
                nodeId=str(node.id), userId=USER_ID, selectedKPIs=["k2", "k3"]
            )
        )

        mock_kpi_repository.add_process.assert_called_once_with(["k3"], str(node.id))
        mock_kpi_repository.remove_process.assert_called_once_with(
            ["k1"], str(node.id)
        )


class TestDeleteNode:
    """Test node deletion."""

    @pytest.mark.asyncio
    async def test_folder_delete_cascades(
        self, service, mock_node_repository, mock_kpi_repository
    ):
        """Everything below a folder is deleted with it."""
        root = _node("Root")
        sub = _node("Sub", parent=root)
        leaf = _node("Leaf", NodeType.FILE, parent=sub, selected_kpis=["k1"])
        other = _node("Other")
        mock_node_repository.get_user_node.return_value = root
        mock_node_repository.get_user_nodes.return_value = [root, sub, leaf, other]

        await service.delete_node(str(root.id), USER_ID)

        deleted = {c.args[0] for c in mock_node_repository.delete.call_args_list}
        assert deleted == {str(root.id), str(sub.id), str(leaf.id)}
        mock_kpi_repository.remove_process.assert_called_once_with(
            ["k1"], str(leaf.id)
        )

    @pytest.mark.asyncio
    async def test_delete_missing(self, service, mock_node_repository):
        """Missing ids and unknown nodes are reported."""
        with pytest.raises(BadRequestError):
            await service.delete_node(None, USER_ID)

        mock_node_repository.get_user_node.return_value = None
        with pytest.raises(NotFoundError):
            await service.delete_node("n", USER_ID)


class TestAdminBpmnService:
    """Test admin file management."""

    @pytest.fixture
    def mock_archived_repository(self):
        """Create a mock archive repository."""
        return AsyncMock(spec=BpmnArchivedNodeRepository)

    @pytest.fixture
    def admin_service(self, mock_node_repository, mock_archived_repository):
        """Create an admin service instance."""
        return AdminBpmnService(mock_node_repository, mock_archived_repository)

    @pytest.mark.asyncio
    async def test_archive_and_unarchive(
        self, admin_service, mock_node_repository, mock_archived_repository
    ):
        """Archiving keeps a copy; unarchiving drops it."""
        node = _node("Invoice", NodeType.FILE)
        mock_node_repository.get_file.return_value = node

        result = await admin_service.patch_file(
            ADMIN, str(node.id), BpmnFilePatchRequest(archived=True, name=42)
        )
        assert result["archived"] is True
        assert result["name"] == "Invoice"
        mock_archived_repository.upsert_from_node.assert_called_once_with(node)

        await admin_service.patch_file(
            ADMIN, str(node.id), BpmnFilePatchRequest(archived=False)
        )
        mock_archived_repository.delete.assert_called_once_with(node.id)

    @pytest.mark.asyncio
    async def test_list_archived_falls_back_to_flags(
        self, admin_service, mock_node_repository, mock_archived_repository
    ):
        """Flagged nodes are listed when the archive is empty."""
        mock_archived_repository.list_archived.return_value = []
        mock_node_repository.get_archived_files.return_value = [
            _node("Old", NodeType.FILE, archived=True)
        ]

        files = await admin_service.list_archived()

        assert [f["name"] for f in files] == ["Old"]
        assert files[0]["archived"] is True

    @pytest.mark.asyncio
    async def test_list_files_with_paths(self, admin_service, mock_node_repository):
        """Files are listed with their folder path."""
        folder = _node("Finance")
        diagram = _node("Invoice", NodeType.FILE, parent=folder)
        mock_node_repository.get_all.return_value = [folder, diagram]
        mock_node_repository.get_files.return_value = [diagram]

        files = await admin_service.list_files()

        assert files[0]["path"] == "Finance/Invoice"

    @pytest.mark.asyncio
    async def test_export_requires_ids(self, admin_service):
        """An export without ids is refused."""
        with pytest.raises(BadRequestError, match="No ids provided"):
            await admin_service.export(" , ")

    @pytest.mark.asyncio
    async def test_missing_file(self, admin_service, mock_node_repository):
        """Unknown files are not found."""
        mock_node_repository.get_file.return_value = None
        with pytest.raises(NotFoundError):
            await admin_service.get_file("x")
        with pytest.raises(NotFoundError):
            await admin_service.delete_file(ADMIN, "x")
