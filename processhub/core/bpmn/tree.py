"""
BPMN node tree assembly.

Nodes are stored flat and linked by ``parent_id``. These helpers turn a flat
list of nodes into the nested structures and listings the API returns.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..models.tortoise_models import BpmnNode, NodeType

NodeDict = Dict[str, Any]


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as ISO 8601, passing None through."""
    return value.isoformat() if value is not None else None


def _type_value(node: Any) -> str:
    node_type = node.type
    return node_type.value if hasattr(node_type, "value") else str(node_type)


def is_file(node: Any) -> bool:
    """Check whether a node is a diagram file."""
    return _type_value(node) == NodeType.FILE.value


def _file_fields(node: BpmnNode) -> NodeDict:
    return {
        "content": node.content,
        "processMetadata": node.process_metadata,
        "advancedDetails": node.advanced_details,
        "signOffData": node.sign_off_data,
        "historyData": node.history_data,
        "triggerData": node.trigger_data,
        "selectedStandards": node.selected_standards or [],
        "selectedKPIs": node.selected_kpis or [],
    }


def serialize_node(node: BpmnNode) -> NodeDict:
    """
    Serialize a single node with all of its stored fields.

    Args:
        node: Node to serialize

    Returns:
        Dictionary with camelCase keys
    """
    data: NodeDict = {
        "id": str(node.id),
        "name": node.name,
        "type": _type_value(node),
        "parentId": node.parent_id,
        "children": list(node.children or []),
    }
    data.update(_file_fields(node))
    data["createdAt"] = isoformat(node.created_at)
    data["updatedAt"] = isoformat(node.updated_at)
    return data


def serialize_admin_file(node: BpmnNode) -> NodeDict:
    """Serialize a file node including ownership and archive state."""
    data = serialize_node(node)
    data.update(
        {
            "userId": node.user_id,
            "ownerUserId": node.owner_user_id or "",
            "archived": bool(node.archived),
        }
    )
    return data


def build_user_tree(nodes: Sequence[BpmnNode]) -> List[NodeDict]:
    """
    Nest a user's nodes under their parents.

    Roots are nodes without a parent. Folders carry their nested children;
    files carry their content and details instead.

    Args:
        nodes: The user's nodes in creation order

    Returns:
        List of root node dictionaries
    """
    by_parent: Dict[Optional[str], List[BpmnNode]] = {}
    for node in nodes:
        by_parent.setdefault(node.parent_id or None, []).append(node)

    def build(parent_id: Optional[str], seen: frozenset) -> List[NodeDict]:
        result = []
        for node in by_parent.get(parent_id, []):
            node_id = str(node.id)
            if node_id in seen:
                continue
            entry: NodeDict = {
                "id": node_id,
                "name": node.name,
                "type": _type_value(node),
                "parentId": node.parent_id,
                "children": [],
            }
            if is_file(node):
                entry.update(_file_fields(node))
            else:
                entry["children"] = build(node_id, seen | {node_id})
            entry["createdAt"] = isoformat(node.created_at)
            entry["updatedAt"] = isoformat(node.updated_at)
            result.append(entry)
        return result

    return build(None, frozenset())


def build_admin_tree(nodes: Sequence[BpmnNode]) -> List[NodeDict]:
    """
    Nest every node in the system under its parent.

    Nodes whose parent is missing become roots.

    Args:
        nodes: All nodes in creation order

    Returns:
        List of root node dictionaries
    """
    entries: Dict[str, NodeDict] = {}
    for node in nodes:
        entries[str(node.id)] = {
            "id": str(node.id),
            "name": node.name,
            "type": _type_value(node),
            "parentId": node.parent_id,
            "userId": node.user_id,
            "archived": bool(node.archived),
            "createdAt": isoformat(node.created_at),
            "updatedAt": isoformat(node.updated_at),
            "children": [],
        }

    roots = []
    for node in nodes:
        entry = entries[str(node.id)]
        parent = entries.get(node.parent_id) if node.parent_id else None
        if parent is not None and parent is not entry:
            parent["children"].append(entry)
        else:
            roots.append(entry)
    return roots


def build_paths(nodes: Sequence[BpmnNode]) -> Dict[str, str]:
    """
    Compute the folder path of every node.

    A path joins the names from the root down to the node itself with ``/``.

    Args:
        nodes: All nodes

    Returns:
        Mapping of node id to path
    """
    parents = {str(n.id): n.parent_id for n in nodes}
    names = {str(n.id): n.name for n in nodes}

    paths = {}
    for node_id in names:
        parts: List[str] = []
        seen = set()
        current: Optional[str] = node_id
        while current and current not in seen:
            seen.add(current)
            name = names.get(current)
            if name:
                parts.insert(0, name)
            current = parents.get(current)
        paths[node_id] = "/".join(parts)
    return paths


def file_listing_entry(node: Any, path: Optional[str] = None) -> NodeDict:
    """
    Summarize a file node for admin listings.

    Args:
        node: File node or archived copy
        path: Folder path, omitted when None

    Returns:
        Listing dictionary
    """
    details = node.advanced_details
    if not isinstance(details, dict):
        details = {}
    entry: NodeDict = {
        "id": str(node.id),
        "name": node.name,
        "userId": node.user_id or "",
        "ownerUserId": node.owner_user_id or "",
        "archived": bool(node.archived),
        "createdBy": details.get("createdBy") or "",
        "createdAt": isoformat(node.created_at),
        "updatedAt": isoformat(node.updated_at),
    }
    if path is not None:
        entry["path"] = path
    return entry
