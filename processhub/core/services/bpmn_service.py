"""
BPMN diagram services for ProcessHub.

``BpmnNodeService`` manages a user's folder and file tree, keeping parent
``children`` lists and KPI associations in step with node changes.
``AdminBpmnService`` gives admins a cross-user view of every file, archive
control and zip export.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Set

from tortoise.exceptions import BaseORMException

from ..auth.decorators import is_admin
from ..bpmn import (
    build_admin_tree,
    build_export_zip,
    build_paths,
    build_user_tree,
    bump_version,
    default_advanced_details,
    default_history_data,
    default_sign_off_data,
    default_trigger_data,
    file_listing_entry,
    is_file,
    serialize_admin_file,
    serialize_node,
)
from ..database.tortoise_schemas import (
    BpmnFilePatchRequest,
    BpmnNodeWriteRequest,
    SessionUser,
)
from ..errors import BadRequestError, ForbiddenError, NotFoundError
from ..logging import SecurityEventType, get_logger, security_logger
from ..models.tortoise_models import BpmnNode, NodeType
from ..repositories.bpmn_repository import (
    BpmnArchivedNodeRepository,
    BpmnNodeRepository,
)
from ..repositories.kpi_repository import KPIRepository
from ..repositories.user_repository import UserRepository

logger = get_logger(__name__)

# Fields copied unchanged from an update request
_PLAIN_UPDATE_FIELDS = (
    "name",
    "content",
    "process_metadata",
    "sign_off_data",
    "history_data",
    "trigger_data",
    "selected_standards",
)


class BpmnNodeService:
    """Folder and file tree operations for a single user."""

    def __init__(
        self,
        node_repository: BpmnNodeRepository,
        kpi_repository: KPIRepository,
        user_repository: UserRepository,
    ) -> None:
        """
        Initialize the service.

        Args:
            node_repository: BPMN node data access
            kpi_repository: KPI data access for process associations
            user_repository: User data access for the ``createdBy`` default
        """
        self.node_repository = node_repository
        self.kpi_repository = kpi_repository
        self.user_repository = user_repository

    @staticmethod
    def check_access(caller: SessionUser, user_id: str) -> None:
        """
        Make sure the caller may work on a user's tree.

        Raises:
            ForbiddenError: If a non-admin addresses another user's tree
        """
        if caller.user_id != user_id and not is_admin(caller.role):
            security_logger.log_access_denied(
                user_id=caller.user_id, resource=f"bpmn-nodes/{user_id}", reason="owner"
            )
            raise ForbiddenError("Access denied")

    async def get_tree(self, user_id: str) -> List[Dict[str, Any]]:
        """Get a user's nodes nested under their folders."""
        nodes = await self.node_repository.get_user_nodes(user_id)
        return build_user_tree(nodes)

    async def get_node(self, user_id: str, node_id: str) -> Dict[str, Any]:
        """
        Get one of a user's nodes.

        Raises:
            NotFoundError: If the node does not exist for this user
        """
        node = await self.node_repository.get_user_node(node_id, user_id)
        if node is None:
            raise NotFoundError("Node not found")
        return serialize_node(node)

    async def _get_folder(self, parent_id: str, user_id: str, missing: str) -> BpmnNode:
        parent = await self.node_repository.get_user_node(parent_id, user_id)
        if parent is None:
            raise NotFoundError(missing)
        if parent.type != NodeType.FOLDER:
            raise BadRequestError("Parent must be a folder")
        return parent

    async def _created_by(self, user_id: str) -> str:
        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            return user_id
        return user.name or user.email or user_id

    async def _sync_kpis(
        self, node_id: str, selected: Sequence[str], previous: Sequence[str] = ()
    ) -> None:
        added = [k for k in selected if k not in previous]
        removed = [k for k in previous if k not in selected]
        try:
            await self.kpi_repository.add_process(added, node_id)
            await self.kpi_repository.remove_process(removed, node_id)
        except BaseORMException as e:
            # Association failures leave the node change in place
            logger.warning("KPI association sync failed", node_id=node_id, error=str(e))

    async def create_node(self, data: BpmnNodeWriteRequest) -> Dict[str, Any]:
        """
        Create a folder or file.

        Files get default advanced details, sign-off, history and trigger
        data unless the request provides them.

        Raises:
            BadRequestError: If required fields are missing or invalid
            NotFoundError: If the parent folder does not exist
        """
        if not data.user_id or not data.type or not data.name:
            raise BadRequestError("userId, type, and name are required")
        if data.type not in (NodeType.FOLDER.value, NodeType.FILE.value):
            raise BadRequestError("type must be folder or file")

        node_type = NodeType(data.type)
        if node_type == NodeType.FILE and not data.content:
            raise BadRequestError("content is required for files")

        parent = None
        if data.parent_id:
            parent = await self._get_folder(
                data.parent_id, data.user_id, "Parent node not found"
            )

        values: Dict[str, Any] = {
            "user_id": data.user_id,
            "type": node_type,
            "name": data.name,
            "parent_id": data.parent_id or None,
            "children": [],
        }
        selected_kpis: List[str] = []
        if node_type == NodeType.FILE:
            details = data.advanced_details
            if details is None:
                details = default_advanced_details(
                    created_by=await self._created_by(data.user_id)
                )
            selected_kpis = list(data.selected_kpis or [])
            values.update(
                {
                    "content": data.content,
                    "process_metadata": data.process_metadata,
                    "advanced_details": details,
                    "sign_off_data": data.sign_off_data or default_sign_off_data(),
                    "history_data": data.history_data or default_history_data(),
                    "trigger_data": data.trigger_data or default_trigger_data(),
                    "selected_standards": list(data.selected_standards or []),
                    "selected_kpis": selected_kpis,
                }
            )

        node = await self.node_repository.create(**values)
        node_id = str(node.id)
        if parent is not None:
            await self.node_repository.add_child(parent, node_id)
        if selected_kpis:
            await self._sync_kpis(node_id, selected_kpis)

        logger.info(
            "BPMN node created",
            node_id=node_id,
            node_type=node_type.value,
            user_id=data.user_id,
        )
        return serialize_node(node)

    async def _is_descendant(self, user_id: str, node_id: str, candidate: str) -> bool:
        nodes = await self.node_repository.get_user_nodes(user_id)
        parents = {str(n.id): n.parent_id for n in nodes}
        seen: Set[str] = set()
        current: Optional[str] = candidate
        while current and current not in seen:
            if current == node_id:
                return True
            seen.add(current)
            current = parents.get(current)
        return False

    async def update_node(self, data: BpmnNodeWriteRequest) -> Dict[str, Any]:
        """
        Update a node.

        Only fields present in the request change. New advanced details bump
        the patch number of the version and stamp the modification date.

        Raises:
            BadRequestError: If ids are missing or the new parent is invalid
            NotFoundError: If the node or the new parent does not exist
        """
        if not data.node_id or not data.user_id:
            raise BadRequestError("nodeId and userId are required")

        node = await self.node_repository.get_user_node(data.node_id, data.user_id)
        if node is None:
            raise NotFoundError("Node not found")
        node_id = str(node.id)
        provided = data.model_fields_set

        changes: Dict[str, Any] = {
            field: getattr(data, field)
            for field in _PLAIN_UPDATE_FIELDS
            if field in provided
        }

        if "selected_kpis" in provided:
            selected = list(data.selected_kpis or [])
            changes["selected_kpis"] = selected
            if is_file(node):
                await self._sync_kpis(node_id, selected, node.selected_kpis or [])

        if "advanced_details" in provided:
            current = node.advanced_details or {}
            changes["advanced_details"] = {
                **(data.advanced_details or {}),
                "versionNo": bump_version(current.get("versionNo")),
                "modificationDate": datetime.now(timezone.utc).isoformat(),
            }

        if "parent_id" in provided and (data.parent_id or None) != node.parent_id:
            new_parent = None
            if data.parent_id:
                if data.parent_id == node_id or await self._is_descendant(
                    data.user_id, node_id, data.parent_id
                ):
                    raise BadRequestError("Cannot move a folder into itself")
                new_parent = await self._get_folder(
                    data.parent_id, data.user_id, "New parent not found"
                )
            await self.node_repository.remove_child(node.parent_id, node_id)
            if new_parent is not None:
                await self.node_repository.add_child(new_parent, node_id)
            changes["parent_id"] = data.parent_id or None

        node = await self.node_repository.update(node, **changes)
        logger.info("BPMN node updated", node_id=node_id, fields=sorted(changes))
        return serialize_node(node)

    async def delete_node(self, node_id: Optional[str], user_id: Optional[str]) -> None:
        """
        Delete a node and, for folders, everything below it.

        Raises:
            BadRequestError: If ids are missing
            NotFoundError: If the node does not exist for this user
        """
        if not node_id or not user_id:
            raise BadRequestError("nodeId and userId are required")

        root = await self.node_repository.get_user_node(node_id, user_id)
        if root is None:
            raise NotFoundError("Node not found")

        user_nodes = await self.node_repository.get_user_nodes(user_id)
        nodes = {str(n.id): n for n in user_nodes}
        below: Dict[str, List[str]] = {}
        for n in nodes.values():
            if n.parent_id:
                below.setdefault(n.parent_id, []).append(str(n.id))

        doomed: List[str] = []
        pending = [str(root.id)]
        while pending:
            current = pending.pop()
            if current in doomed:
                continue
            doomed.append(current)
            child_ids = set(below.get(current, []))
            if current in nodes:
                child_ids.update(nodes[current].children or [])
            pending.extend(c for c in child_ids if c in nodes)

        await self.node_repository.remove_child(root.parent_id, str(root.id))
        for current in doomed:
            node = nodes.get(current, root)
            if is_file(node) and node.selected_kpis:
                await self._sync_kpis(current, [], node.selected_kpis)
            await self.node_repository.delete(current)

        logger.info("BPMN node deleted", node_id=node_id, removed=len(doomed))


class AdminBpmnService:
    """Cross-user management of BPMN files."""

    def __init__(
        self,
        node_repository: BpmnNodeRepository,
        archived_repository: BpmnArchivedNodeRepository,
    ) -> None:
        """Initialize the service with its repositories."""
        self.node_repository = node_repository
        self.archived_repository = archived_repository

    async def tree(self) -> List[Dict[str, Any]]:
        """Get every node in the system nested under its parent."""
        return build_admin_tree(await self.node_repository.get_all_ordered())

    async def list_files(self) -> List[Dict[str, Any]]:
        """Get every file with its folder path, newest first."""
        paths = build_paths(await self.node_repository.get_all())
        files = await self.node_repository.get_files()
        return [file_listing_entry(f, paths.get(str(f.id), f.name)) for f in files]

    async def get_file(self, file_id: str) -> Dict[str, Any]:
        """
        Get a file with all of its fields.

        Raises:
            NotFoundError: If no such file exists
        """
        node = await self.node_repository.get_file(file_id)
        if node is None:
            raise NotFoundError("Not found")
        return serialize_admin_file(node)

    async def delete_file(self, caller: SessionUser, file_id: str) -> None:
        """
        Delete a file, detaching it from its folder.

        Raises:
            NotFoundError: If no such file exists
        """
        node = await self.node_repository.get_file(file_id)
        if node is None:
            raise NotFoundError("Not found")

        await self.node_repository.remove_child(node.parent_id, str(node.id))
        await self.node_repository.delete(node.id)
        await self.archived_repository.delete(node.id)
        security_logger.log_security_event(
            SecurityEventType.ADMIN_ACTION,
            user_id=caller.user_id,
            details={"action": "delete_bpmn_file", "file_id": str(node.id)},
        )

    async def patch_file(
        self, caller: SessionUser, file_id: str, data: BpmnFilePatchRequest
    ) -> Dict[str, Any]:
        """
        Rename, reassign or (un)archive a file.

        Values of the wrong type are ignored. Archiving keeps a copy in the
        archive collection; unarchiving removes it.

        Raises:
            NotFoundError: If no such file exists
        """
        node = await self.node_repository.get_file(file_id)
        if node is None:
            raise NotFoundError("Not found")

        changes: Dict[str, Any] = {}
        if isinstance(data.name, str):
            changes["name"] = data.name
        if isinstance(data.ownerUserId, str):
            changes["owner_user_id"] = data.ownerUserId
        if isinstance(data.userId, str):
            changes["user_id"] = data.userId
        if isinstance(data.archived, bool):
            changes["archived"] = data.archived

        node = await self.node_repository.update(node, **changes)

        if isinstance(data.archived, bool):
            if data.archived:
                await self.archived_repository.upsert_from_node(node)
            else:
                await self.archived_repository.delete(node.id)

        security_logger.log_security_event(
            SecurityEventType.ADMIN_ACTION,
            user_id=caller.user_id,
            details={
                "action": "update_bpmn_file",
                "file_id": str(node.id),
                "fields": sorted(changes),
            },
        )
        return serialize_admin_file(node)

    async def list_archived(self) -> List[Dict[str, Any]]:
        """
        Get archived files, most recently updated first.

        Falls back to file nodes flagged as archived when the archive
        collection is empty.
        """
        archived: Sequence[Any] = await self.archived_repository.list_archived()
        if not archived:
            archived = await self.node_repository.get_archived_files()
        return [file_listing_entry(f) for f in archived]

    async def export(self, ids: Optional[str]) -> bytes:
        """
        Export files as a zip archive.

        Args:
            ids: Comma separated file ids

        Raises:
            BadRequestError: If no ids are given
        """
        id_list = [i.strip() for i in (ids or "").split(",") if i.strip()]
        if not id_list:
            raise BadRequestError("No ids provided")

        files = await self.node_repository.get_files_by_ids(id_list)
        logger.info("Exporting BPMN files", requested=len(id_list), found=len(files))
        return build_export_zip(files)
