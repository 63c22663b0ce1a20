"""
State Import/Export

Converts between LedgerState and its external JSON representation.

Persisted layout (camelCase keys):
    {"accounts": [...], "categories": [...], "transactions": [...], "darkMode": false}

An export wraps the same layout with "exportDate" (ISO-8601) and
"version". Amounts are written as JSON strings so no precision is
lost; numbers are accepted on import.

DESIGN DECISION: Import is all-or-nothing. The whole payload is
checked against the schema before a LedgerState is built, and any
problem raises ImportFormatError listing every issue found.
"""

import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from finance_ledger.errors import ImportFormatError
from finance_ledger.ledger import transfers
from finance_ledger.models.entities import LedgerState, utc_now


logger = structlog.get_logger(__name__)

EXPORT_FORMAT_VERSION = "1.0.0"
REQUIRED_COLLECTIONS = ("accounts", "categories", "transactions")

Payload = Union[str, bytes, bytearray, Mapping]


def dump_state(state: LedgerState) -> dict[str, Any]:
    """The persisted layout of a state, JSON-ready."""
    return state.model_dump(mode="json", by_alias=True, exclude_none=True)


def export_state(
    state: LedgerState,
    *,
    version: Optional[str] = None,
    exported_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """Persisted layout plus export metadata."""
    payload = dump_state(state)
    payload["exportDate"] = (exported_at or utc_now()).isoformat()
    payload["version"] = version or EXPORT_FORMAT_VERSION
    return payload


def export_json(
    state: LedgerState,
    *,
    version: Optional[str] = None,
    exported_at: Optional[datetime] = None,
    indent: Optional[int] = 2,
) -> str:
    return json.dumps(
        export_state(state, version=version, exported_at=exported_at),
        indent=indent,
        ensure_ascii=False,
    )


def export_filename(day: date) -> str:
    """Suggested download name for an export made on `day`."""
    return f"finance-data-{day.isoformat()}.json"


def _decode(payload: Payload) -> Any:
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            return json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ImportFormatError([f"Not valid JSON: {e}"]) from e
    if isinstance(payload, Mapping):
        return dict(payload)
    raise ImportFormatError([f"Unsupported payload type: {type(payload).__name__}"])


def _shape_problems(data: Any) -> list[str]:
    if not isinstance(data, dict):
        return ["Top-level value must be a JSON object"]

    problems = []
    for key in REQUIRED_COLLECTIONS:
        if key not in data:
            problems.append(f"Missing required field '{key}'")
        elif not isinstance(data[key], list):
            problems.append(f"Field '{key}' must be a list")

    if "darkMode" in data and not isinstance(data["darkMode"], bool):
        problems.append("Field 'darkMode' must be a boolean")

    return problems


def _describe(error: PydanticValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}")
    return problems


def _duplicate_id_problems(state: LedgerState) -> list[str]:
    problems = []
    for key, items in (
        ("accounts", state.accounts),
        ("categories", state.categories),
        ("transactions", state.transactions),
    ):
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                problems.append(f"Duplicate id '{item.id}' in '{key}'")
            seen.add(item.id)
    return problems


def import_state(
    payload: Payload,
    *,
    collapse_legacy_transfers: bool = False,
) -> LedgerState:
    """
    Parse and validate an external payload.

    Args:
        payload: JSON text/bytes, or an already-decoded mapping
        collapse_legacy_transfers: Rewrite paired transfer legs into
            canonical transfers after validation

    Returns:
        The imported LedgerState. Export metadata is ignored.

    Raises:
        ImportFormatError: The payload is not an object, a required
            collection is missing or not a list, darkMode is not a
            boolean, any entity fails schema validation, or two
            entities of the same kind share an id.
    """
    data = _decode(payload)

    problems = _shape_problems(data)
    if problems:
        logger.warning("import_rejected", problems=problems)
        raise ImportFormatError(problems)

    fields = {key: data[key] for key in REQUIRED_COLLECTIONS}
    fields["darkMode"] = data.get("darkMode", False)

    try:
        state = LedgerState.model_validate(fields)
    except PydanticValidationError as e:
        problems = _describe(e)
        logger.warning("import_rejected", problems=problems[:10], problem_count=len(problems))
        raise ImportFormatError(problems) from e

    problems = _duplicate_id_problems(state)
    if problems:
        logger.warning("import_rejected", problems=problems[:10], problem_count=len(problems))
        raise ImportFormatError(problems)

    if collapse_legacy_transfers:
        state = state.model_copy(
            update={"transactions": transfers.collapse_legacy_transfers(state.transactions)}
        )

    logger.info(
        "state_imported",
        accounts=len(state.accounts),
        categories=len(state.categories),
        transactions=len(state.transactions),
    )
    return state
