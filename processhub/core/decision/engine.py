"""
Decision rule evaluation for ProcessHub.

A decision rule holds rule items; each item has conditions joined by AND/OR,
actions, and a priority. Every row of input data is checked against every
rule item of every selected rule. Matches are ordered by priority, highest
first, and the first action of the top match becomes the row's final action.
"""

import math
import uuid
from typing import Any, Dict, Iterable, List, Optional

from ..logging import get_logger

logger = get_logger(__name__)

NO_MATCH = "No match"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> Optional[float]:
    """
    Convert a cell value to a number.

    Args:
        value: Raw value from the data row or condition

    Returns:
        Float value, or None when the value is not numeric
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        result = float(value)
        return None if math.isnan(result) else result
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
        return None if math.isnan(result) else result
    return None


def to_text(value: Any) -> str:
    """Render a value the way it would appear in a spreadsheet cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def loose_equals(left: Any, right: Any) -> bool:
    """
    Compare two values, treating numeric strings as equal to numbers.

    ``5 == "5"`` and ``"5.0" == 5`` hold; booleans compare as 1/0 against
    numbers; two strings compare exactly.
    """
    if left is None or right is None:
        return left is None and right is None

    if isinstance(left, str) and isinstance(right, str):
        return left == right

    numeric_left = _is_number(left) or isinstance(left, bool)
    numeric_right = _is_number(right) or isinstance(right, bool)
    if numeric_left or numeric_right:
        if isinstance(left, (list, dict)) or isinstance(right, (list, dict)):
            return False
        a, b = to_number(left), to_number(right)
        if a is None or b is None:
            return False
        return a == b

    return bool(left == right)


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _compare_numbers(left: Any, right: Any, operator: str) -> bool:
    a, b = to_number(left), to_number(right)
    if a is None or b is None:
        return False
    if operator == ">":
        return a > b
    if operator == "<":
        return a < b
    if operator == ">=":
        return a >= b
    return a <= b


def evaluate_condition(row: Dict[str, Any], condition: Dict[str, Any]) -> bool:
    """
    Evaluate one condition against a data row.

    Args:
        row: Data row keyed by column name
        condition: Condition with ``field``, ``operator`` and ``value``

    Returns:
        True when the condition holds; unknown operators never match
    """
    field_value = row.get(condition.get("field", ""))
    operator = condition.get("operator")
    expected = condition.get("value")

    if operator == "==":
        return loose_equals(field_value, expected)
    if operator == "!=":
        return not loose_equals(field_value, expected)
    if operator in (">", "<", ">=", "<="):
        return _compare_numbers(field_value, expected, operator)
    if operator == "contains":
        return to_text(expected).lower() in to_text(field_value).lower()
    if operator == "startsWith":
        return to_text(field_value).lower().startswith(to_text(expected).lower())
    if operator == "endsWith":
        return to_text(field_value).lower().endswith(to_text(expected).lower())
    if operator == "in":
        return any(loose_equals(field_value, v) for v in _as_list(expected))
    if operator == "notIn":
        return not any(loose_equals(field_value, v) for v in _as_list(expected))

    logger.debug("Unknown condition operator", operator=operator)
    return False


def evaluate_rule_item(row: Dict[str, Any], rule_item: Dict[str, Any]) -> bool:
    """
    Evaluate the conditions of one rule item.

    An item without conditions always matches. ``logicOperator`` defaults to
    AND; any other value than AND is treated as OR.
    """
    conditions = rule_item.get("conditions") or []
    if not conditions:
        return True

    if (rule_item.get("logicOperator") or "AND") == "AND":
        return all(evaluate_condition(row, c) for c in conditions)
    return any(evaluate_condition(row, c) for c in conditions)


def _priority(match: Dict[str, Any]) -> float:
    value = to_number(match.get("priority"))
    return value if value is not None else 0.0


def execute_rules(
    rows: Iterable[Dict[str, Any]], rules: Iterable[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """
    Run decision rules over data rows.

    Args:
        rows: Input data rows
        rules: Decision rules, each with ``id``, ``name`` and ``rules`` items

    Returns:
        One result per row with ``data``, ``matchedRules``, ``finalAction``
        and ``success``
    """
    rules = list(rules)
    results = []

    for row in rows:
        row_data = row if isinstance(row, dict) else {}
        matches = []
        for rule in rules:
            for item in rule.get("rules") or []:
                if evaluate_rule_item(row_data, item):
                    matches.append(
                        {
                            "ruleId": rule.get("id"),
                            "ruleName": rule.get("name"),
                            "ruleItemName": item.get("name"),
                            "conditions": item.get("conditions") or [],
                            "actions": item.get("actions") or [],
                            "priority": item.get("priority", 0),
                            "logicOperator": item.get("logicOperator", "AND"),
                        }
                    )

        # sorted() is stable, so equal priorities keep rule order
        matches = sorted(matches, key=_priority, reverse=True)

        final_action: Any = NO_MATCH
        if matches:
            actions = matches[0]["actions"]
            final_action = actions[0].get("value") if actions else None

        results.append(
            {
                "data": row,
                "matchedRules": matches,
                "finalAction": final_action,
                "success": bool(matches),
            }
        )

    return results


def assign_rule_ids(rule_items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Give rule items, conditions and actions an ``id`` when they lack one.

    Args:
        rule_items: Rule items as received from the client

    Returns:
        New list of rule items with ids and defaults filled in
    """
    prepared = []
    for item in rule_items or []:
        item = dict(item)
        item["id"] = item.get("id") or str(uuid.uuid4())
        item.setdefault("logicOperator", "AND")
        item.setdefault("priority", 0)
        item["conditions"] = [
            {**c, "id": c.get("id") or str(uuid.uuid4())}
            for c in item.get("conditions") or []
        ]
        item["actions"] = [
            {**a, "id": a.get("id") or str(uuid.uuid4())}
            for a in item.get("actions") or []
        ]
        prepared.append(item)
    return prepared
