"""
BPMN node repositories for ProcessHub.

Nodes reference each other by string id: ``parent_id`` points up the tree
and ``children`` lists the ids directly below a folder.
"""

from typing import List, Optional, Union
from uuid import UUID

from ..models.tortoise_models import BpmnArchivedNode, BpmnNode, NodeType
from .base import BaseRepository, parse_uuid


class BpmnNodeRepository(BaseRepository[BpmnNode]):
    """Data access for folders and diagram files."""

    def __init__(self) -> None:
        """Initialize BPMN node repository."""
        super().__init__(BpmnNode)

    async def get_user_node(
        self, node_id: Union[str, UUID, None], user_id: str
    ) -> Optional[BpmnNode]:
        """
        Get a node belonging to a user.

        Args:
            node_id: Node identifier
            user_id: Owning user id

        Returns:
            Node instance or None
        """
        pk = parse_uuid(node_id)
        if pk is None:
            return None
        return await self.find_one_by(id=pk, user_id=user_id)

    async def get_user_nodes(self, user_id: str) -> List[BpmnNode]:
        """Get all nodes of a user in creation order."""
        return await self.find_by(order_by=["created_at"], user_id=user_id)

    async def get_all_ordered(self) -> List[BpmnNode]:
        """Get every node in creation order."""
        return await self.get_all(order_by=["created_at"])

    async def get_file(self, node_id: Union[str, UUID, None]) -> Optional[BpmnNode]:
        """Get a file node by id."""
        pk = parse_uuid(node_id)
        if pk is None:
            return None
        return await self.find_one_by(id=pk, type=NodeType.FILE)

    async def get_files(self) -> List[BpmnNode]:
        """Get every file node, newest first."""
        return await self.find_by(order_by=["-created_at"], type=NodeType.FILE)

    async def get_archived_files(self) -> List[BpmnNode]:
        """Get archived file nodes, most recently updated first."""
        return await self.find_by(
            order_by=["-updated_at"], type=NodeType.FILE, archived=True
        )

    async def get_files_by_ids(self, node_ids: List[str]) -> List[BpmnNode]:
        """Get file nodes by id; malformed ids are ignored."""
        pks = [pk for pk in map(parse_uuid, node_ids) if pk]
        if not pks:
            return []
        return await self.find_by(
            order_by=["created_at"], id__in=pks, type=NodeType.FILE
        )

    async def count_user_files(self, user_id: str) -> int:
        """Count a user's diagram files."""
        return await self.count(user_id=user_id, type=NodeType.FILE)

    async def add_child(self, parent: BpmnNode, child_id: str) -> None:
        """Append a node id to a folder's children."""
        children = list(parent.children or [])
        if child_id not in children:
            children.append(child_id)
            await self.update(parent, children=children)

    async def remove_child(self, parent_id: Optional[str], child_id: str) -> None:
        """Remove a node id from a folder's children."""
        parent = await self.get_by_id(parent_id)
        if parent is None:
            return
        children = [c for c in parent.children or [] if c != child_id]
        await self.update(parent, children=children)


class BpmnArchivedNodeRepository(BaseRepository[BpmnArchivedNode]):
    """Data access for the archived copies of BPMN files."""

    def __init__(self) -> None:
        """Initialize archived node repository."""
        super().__init__(BpmnArchivedNode)

    async def upsert_from_node(self, node: BpmnNode) -> BpmnArchivedNode:
        """
        Store or refresh the archived copy of a file node.

        Args:
            node: File node being archived

        Returns:
            Archived copy
        """
        values = {
            "user_id": node.user_id,
            "owner_user_id": node.owner_user_id or "",
            "type": node.type,
            "name": node.name,
            "parent_id": node.parent_id,
            "content": node.content,
            "process_metadata": node.process_metadata,
            "advanced_details": node.advanced_details,
            "archived": True,
            "created_at": node.created_at,
        }
        archived, _ = await self.model.update_or_create(defaults=values, id=node.id)
        return archived

    async def list_archived(self) -> List[BpmnArchivedNode]:
        """Get archived copies, most recently updated first."""
        return await self.find_by(order_by=["-updated_at"], archived=True)
