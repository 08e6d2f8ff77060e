import math
from typing import Any, Dict, List, Optional, Union

from .errors import ValidationError

REQUIRED_STR_FIELDS = ["title", "description", "category"]
OPTIONAL_STR_FIELDS = ["status"]
UPDATABLE_FIELDS = ["title", "description", "category", "budget", "status"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def parse_budget(v: Any) -> Optional[Union[int, float]]:
    """Numbers pass through; numeric strings such as "500" from a form are converted."""
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return v
    if isinstance(v, str):
        try:
            number = float(v.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def validate_job(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Checks only what the backend cannot do without: text fields and a budget.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data or data[f] is None:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    # Zero is a valid budget; only an absent one is not
    if data.get("budget") is None:
        errors.append("Missing required field: budget")
    elif parse_budget(data["budget"]) is None:
        errors.append("Field 'budget' must be a number")

    for f in OPTIONAL_STR_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    return errors


def require_valid_job(data: Dict[str, Any]) -> None:
    errors = validate_job(data)
    if errors:
        raise ValidationError(errors)


def _wire_values(payload: Dict[str, Any]) -> Dict[str, Any]:
    if "status" in payload and hasattr(payload["status"], "value"):
        payload["status"] = payload["status"].value
    if payload.get("budget") is not None:
        budget = parse_budget(payload["budget"])
        if budget is not None:
            payload["budget"] = budget
    return payload


def create_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Body for a create request; call after require_valid_job."""
    return _wire_values(dict(data))


def update_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the fields an update may change."""
    return _wire_values({k: data[k] for k in UPDATABLE_FIELDS if k in data})
