"""
Best-effort structured extraction of plans from planner output.

``parse_plan`` is a pure ``text -> Plan`` function and never raises. It works in
bounded stages:

1. locate the structured block: a ```json fence, then any fence, then the
   first top-level ``{...}`` span;
2. normalize it: drop fence markers and ``//`` line comments, trim to the
   outermost braces when the delimiters are unbalanced;
3. strict ``json.loads``, then once more with trailing commas removed;
4. field-level regex recovery: every ``"id"`` occurrence starts a node and
   the i-th occurrence of each other field is assigned to the i-th node.

Missing fields fall back to the defaults in ``plan.py``.
"""

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from agent_orchestra.logger import logger

from .plan import (
    DEFAULT_INSTRUCTIONS,
    DEFAULT_OBJECTIVE,
    DEFAULT_ROLE,
    Plan,
    SubtaskNode,
    auto_id,
    coerce_depends_on,
)

JSON_FENCE = re.compile(r"```[ \t]*(?:jsonc|json5?)[ \t]*\n?([\s\S]*?)```", re.IGNORECASE)
ANY_FENCE = re.compile(r"```[ \t]*[A-Za-z0-9_-]*[ \t]*\n?([\s\S]*?)```")
FENCE_MARKER = re.compile(r"```[A-Za-z0-9_-]*")
TRAILING_COMMA = re.compile(r",(\s*[}\]])")

SUBTASK_KEYS = ("subTasks", "subtasks", "sub_tasks", "tasks")

STRING_VALUE = r'"((?:[^"\\]|\\.)*)"'
FIELD_PATTERNS: Dict[str, re.Pattern] = {
    "id": re.compile(r'"id"\s*:\s*(?:' + STRING_VALUE + r"|(-?\d+))"),
    "description": re.compile(r'"taskDescription"\s*:\s*' + STRING_VALUE),
    "assigned_role": re.compile(r'"agentRole"\s*:\s*' + STRING_VALUE),
    "objective": re.compile(r'"agentObjective"\s*:\s*' + STRING_VALUE),
    "instructions": re.compile(r'"agentTaskPrompt"\s*:\s*' + STRING_VALUE),
    "use_augmented_capability": re.compile(
        r'"(?:enableAugmentedCapability|enableGoogleSearch)"\s*:\s*"?(true|false)"?',
        re.IGNORECASE,
    ),
    "depends_on": re.compile(r'"dependsOn"\s*:\s*\[([\s\S]*?)\]'),
}
QUOTED = re.compile(STRING_VALUE)


def _balanced_span(text: str, start: int) -> Optional[str]:
    """Return the ``{...}`` span opening at ``start``, string-aware; None if unbalanced."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def extract_block(text: str) -> Optional[str]:
    """Locate the candidate structured block in free-form text."""
    if not text:
        return None
    match = JSON_FENCE.search(text)
    if match:
        return match.group(1)
    match = ANY_FENCE.search(text)
    if match and "{" in match.group(1):
        return match.group(1)
    start = text.find("{")
    if start < 0:
        return None
    span = _balanced_span(text, start)
    # unbalanced spans are handed on whole; normalization trims them
    return span if span is not None else text[start:]


def strip_line_comments(text: str) -> str:
    """Remove ``//`` comments outside of string literals."""
    out: List[str] = []
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif ch == "/" and text.startswith("//", i):
            newline = text.find("\n", i)
            if newline < 0:
                break
            i = newline
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def normalize_block(block: str) -> Optional[str]:
    content = FENCE_MARKER.sub("", block)
    content = strip_line_comments(content).strip()
    if not (content.startswith("{") and content.endswith("}")):
        start = content.find("{")
        end = content.rfind("}")
        if start < 0 or end <= start:
            logger.warning("Structured block has no usable brace span")
            return None
        content = content[start : end + 1]
    return content


def _load_json(content: str) -> Optional[Any]:
    for candidate in (content, TRAILING_COMMA.sub(r"\1", content)):
        try:
            return json.loads(candidate, strict=False)
        except json.JSONDecodeError:
            continue
    return None


def _subtask_list(data: Any) -> Optional[List[Any]]:
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return None
    for key in SUBTASK_KEYS:
        if isinstance(data.get(key), list):
            return data[key]
    if "id" in data or "agentTaskPrompt" in data:
        return [data]
    return None


def nodes_from_dicts(items: List[Any]) -> List[SubtaskNode]:
    nodes = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"Skipping subtask {i}: expected an object, got {type(item).__name__}")
            continue
        try:
            nodes.append(SubtaskNode.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed subtask {i}: {e}")
    return nodes


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


def _nth(matches: List[re.Match], i: int) -> Optional[re.Match]:
    return matches[i] if i < len(matches) else None


def _parse_dependency_list(raw: str) -> List[str]:
    quoted = [_unescape(m.group(1)) for m in QUOTED.finditer(raw)]
    if quoted:
        return coerce_depends_on(quoted)
    return coerce_depends_on(raw)


def recover_nodes(content: str) -> List[SubtaskNode]:
    """
    Field-level regex reconstruction. Fields are matched independently, so
    node ``i`` receives the ``i``-th occurrence of every field.
    """
    matches = {name: list(p.finditer(content)) for name, p in FIELD_PATTERNS.items()}
    id_matches = matches["id"]
    if not id_matches:
        return []
    nodes = []
    for i, id_match in enumerate(id_matches):
        node_id = id_match.group(1) if id_match.group(1) is not None else id_match.group(2)
        fields: Dict[str, Any] = {"id": _unescape(node_id or "") or auto_id(i)}

        defaults = {
            "description": f"Subtask {i + 1}",
            "assigned_role": DEFAULT_ROLE,
            "objective": DEFAULT_OBJECTIVE,
            "instructions": DEFAULT_INSTRUCTIONS,
        }
        for name, default in defaults.items():
            m = _nth(matches[name], i)
            fields[name] = _unescape(m.group(1)) if m else default

        m = _nth(matches["use_augmented_capability"], i)
        fields["use_augmented_capability"] = bool(m) and m.group(1).lower() == "true"

        m = _nth(matches["depends_on"], i)
        fields["depends_on"] = _parse_dependency_list(m.group(1)) if m else []

        nodes.append(SubtaskNode(**fields))
    return nodes


def parse_plan(text: str) -> Plan:
    """Extract a plan from planner output. Never raises; worst case is an empty plan."""
    try:
        block = extract_block(text)
        if block is None:
            logger.warning("No structured block found in planner output")
            return Plan()
        content = normalize_block(block)
        if content is None:
            return Plan()

        data = _load_json(content)
        if data is not None:
            items = _subtask_list(data)
            if items is not None:
                return Plan(nodes=nodes_from_dicts(items))
            logger.warning("Parsed block has no subtask list, trying field recovery")
        else:
            logger.warning("Strict parse of plan failed, falling back to field recovery")

        nodes = recover_nodes(content)
        if not nodes:
            logger.warning("Field recovery found no subtasks")
        else:
            logger.info(f"Recovered {len(nodes)} subtasks from malformed plan")
        return Plan(nodes=nodes)
    except Exception as e:
        logger.error(f"Unexpected failure while parsing plan: {e}")
        return Plan()
