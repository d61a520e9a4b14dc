"""
Decision service for ProcessHub.

This module manages stored decision rules, runs them over tabular data and
moves that data in and out of spreadsheets.
"""

import base64
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..database.tortoise_schemas import (
    DecisionRuleWriteRequest,
    ExecuteRulesRequest,
    ExportRequest,
    SessionUser,
    TriggerWorkflowRequest,
)
from ..decision import (
    DEFAULT_EXPORT_FILENAME,
    XLSX_MIME_TYPE,
    SpreadsheetError,
    assign_rule_ids,
    build_workbook,
    execute_rules,
    parse_spreadsheet,
)
from ..errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from ..logging import get_logger
from ..models.tortoise_models import DecisionExportFile, DecisionRule
from ..repositories.decision_repository import (
    DecisionExportRepository,
    DecisionRuleRepository,
)

logger = get_logger(__name__)

RULE_ACCESS_DENIED = "Rule not found or access denied"


def _rule_as_dict(rule: DecisionRule) -> Dict[str, Any]:
    return {"id": str(rule.id), "name": rule.name, "rules": rule.rules or []}


class DecisionService:
    """Decision rule management and execution."""

    def __init__(
        self,
        rule_repository: DecisionRuleRepository,
        export_repository: DecisionExportRepository,
    ) -> None:
        """
        Initialize the decision service.

        Args:
            rule_repository: Decision rule data access
            export_repository: Saved export data access
        """
        self.rule_repository = rule_repository
        self.export_repository = export_repository

    async def list_rules(self, caller: SessionUser) -> List[DecisionRule]:
        """Get the caller's rules, newest first."""
        return await self.rule_repository.get_for_owner(caller.email)

    async def create_rule(
        self, caller: SessionUser, data: DecisionRuleWriteRequest
    ) -> DecisionRule:
        """
        Store a new rule owned by the caller.

        Rule items, conditions and actions without an id get one.

        Raises:
            BadRequestError: If the rule has no name
        """
        if not data.name:
            raise BadRequestError("Rule name is required")

        values = data.model_dump(
            include={"name", "description", "status", "associated_bpmn_processes"},
            exclude_none=True,
        )
        rule = await self.rule_repository.create(
            **values,
            rules=assign_rule_ids(data.rules or []),
            created_by=caller.email,
            version=1,
        )
        logger.info("Decision rule created", rule_id=str(rule.id), owner=caller.email)
        return rule

    async def update_rule(
        self, caller: SessionUser, data: DecisionRuleWriteRequest
    ) -> DecisionRule:
        """
        Update one of the caller's rules and increment its version.

        Raises:
            ForbiddenError: If the rule is missing or owned by someone else
        """
        rule = await self.rule_repository.get_owned(data.rule_id, caller.email)
        if rule is None:
            raise ForbiddenError(RULE_ACCESS_DENIED)

        changes = data.model_dump(
            include={"name", "description", "status", "associated_bpmn_processes"},
            exclude_none=True,
        )
        if data.rules is not None:
            changes["rules"] = assign_rule_ids(data.rules)
        changes["version"] = (rule.version or 1) + 1
        return await self.rule_repository.update(rule, **changes)

    async def delete_rule(self, caller: SessionUser, rule_id: Optional[str]) -> None:
        """
        Delete one of the caller's rules.

        Raises:
            BadRequestError: If no id is given
            ForbiddenError: If the rule is missing or owned by someone else
        """
        if not rule_id:
            raise BadRequestError("Rule ID is required")
        rule = await self.rule_repository.get_owned(rule_id, caller.email)
        if rule is None:
            raise ForbiddenError(RULE_ACCESS_DENIED)
        await self.rule_repository.delete(rule.id)

    async def execute(self, data: ExecuteRulesRequest) -> List[Dict[str, Any]]:
        """
        Run active rules over rows of data.

        Raises:
            BadRequestError: If ``data`` is not a list
            NotFoundError: If there is no active rule to run
        """
        if not isinstance(data.data, list):
            raise BadRequestError("Invalid data format")

        rules = await self.rule_repository.get_active(data.rule_ids)
        if not rules:
            raise NotFoundError("No active rules found")

        results = execute_rules(data.data, [_rule_as_dict(r) for r in rules])
        logger.info(
            "Decision rules executed",
            rows=len(results),
            rules=len(rules),
            matched=sum(1 for r in results if r["success"]),
        )
        return results

    @staticmethod
    def import_file(content: bytes, filename: Optional[str]) -> Dict[str, Any]:
        """
        Parse an uploaded spreadsheet into rows and typed columns.

        Raises:
            BadRequestError: If the file cannot be read
        """
        try:
            result = parse_spreadsheet(content, filename)
        except SpreadsheetError as e:
            logger.warning("Spreadsheet import failed", filename=filename, error=str(e))
            raise BadRequestError("Invalid file format") from e
        logger.info("Spreadsheet imported", filename=filename, rows=result["rowCount"])
        return result

    async def export(
        self, data: ExportRequest, caller: Optional[SessionUser]
    ) -> Dict[str, Any]:
        """
        Write rows to an xlsx workbook, optionally saving it for the caller.

        Returns:
            Dictionary with the base64 workbook, file name and MIME type

        Raises:
            BadRequestError: If ``data`` is not a list of rows
            UnauthorizedError: If saving without a session
        """
        if not isinstance(data.data, list):
            raise BadRequestError("Invalid data format")

        rows = [row for row in data.data if isinstance(row, dict)]
        content = build_workbook(rows)
        encoded = base64.b64encode(content).decode("ascii")
        filename = data.filename or DEFAULT_EXPORT_FILENAME

        if data.save:
            if caller is None:
                raise UnauthorizedError("Unauthorized")
            saved = await self.export_repository.create(
                name=filename,
                mime_type=XLSX_MIME_TYPE,
                size=len(content),
                data_base64=encoded,
                created_by=caller.email,
            )
            logger.info("Export saved", file_id=str(saved.id), owner=caller.email)

        return {
            "success": True,
            "data": encoded,
            "filename": filename,
            "mimeType": XLSX_MIME_TYPE,
        }

    async def list_exports(self, caller: SessionUser) -> List[DecisionExportFile]:
        """Get the caller's saved exports, newest first."""
        return await self.export_repository.get_for_owner(caller.email)

    async def get_export(self, caller: SessionUser, file_id: str) -> DecisionExportFile:
        """
        Get one of the caller's saved exports.

        Raises:
            NotFoundError: If the export is missing or owned by someone else
        """
        saved = await self.export_repository.get_owned(file_id, caller.email)
        if saved is None:
            raise NotFoundError("Not found")
        return saved

    @staticmethod
    def trigger_workflow(data: TriggerWorkflowRequest) -> Dict[str, Any]:
        """
        Start a workflow for decision results.

        No workflow engine is attached; the returned instance is a
        placeholder describing what would be started.

        Raises:
            BadRequestError: If the process id or results are missing
        """
        if not data.bpmn_process_id or not data.execution_result:
            raise BadRequestError("Process ID and execution result are required")

        workflow = {
            "processId": data.bpmn_process_id,
            "instanceId": f"instance_{int(time.time() * 1000)}",
            "status": "started",
            "variables": {
                "decisionResults": data.execution_result,
                "triggeredAt": datetime.now(timezone.utc).isoformat(),
            },
        }
        logger.info("Workflow triggered", process_id=data.bpmn_process_id)
        return workflow
