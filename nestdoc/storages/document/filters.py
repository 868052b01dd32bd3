"""Filter evaluation for document stores.

Every document store in nestdoc accepts MongoDB-style filter documents.
The MongoDB backend hands them to the server unchanged; backends without a
native query language (the in-memory store) evaluate them here.

Supported syntax:
    {
        "parent": "0",                          # implicit $eq
        "lft": {"$gte": 3, "$lte": 10},         # comparison operators
        "item": {"$in": ["a", "b"]},
        "level": {"$exists": True},
        "$or": [{"parent": "a"}, {"parent": "b"}],
    }

Dot notation ("meta.kind") reaches into nested dicts. Comparisons between
values of incompatible types never match, the way MongoDB type brackets
behave.
"""
from typing import Any, Dict, List, Optional, Tuple

from ...exceptions import ValidationError


_MISSING = object()


class FilterMatcher:
    """Evaluate MongoDB-style filters against plain dict documents.

    Example:
        >>> matcher = FilterMatcher()
        >>> matcher.matches({"lft": 4}, {"lft": {"$gt": 1, "$lt": 5}})
        True
    """

    # Comparison operators (MongoDB-style)
    COMPARISON_OPS = {
        "$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$exists"
    }

    # Logical operators (MongoDB-style)
    LOGICAL_OPS = {
        "$and", "$or", "$nor"
    }

    def matches(self, document: Dict[str, Any], filter_dict: Optional[Dict[str, Any]]) -> bool:
        """Whether ``document`` satisfies ``filter_dict``.

        An empty or None filter matches every document.

        Raises:
            ValidationError: On an unknown operator or malformed operand
        """
        if not filter_dict:
            return True

        for key, value in filter_dict.items():
            if key in self.LOGICAL_OPS:
                if not isinstance(value, list):
                    raise ValidationError(f"{key} expects a list of filters")
                results = [self.matches(document, sub) for sub in value]
                if key == "$and" and not all(results):
                    return False
                if key == "$or" and not any(results):
                    return False
                if key == "$nor" and any(results):
                    return False
            elif key.startswith("$"):
                raise ValidationError(f"Unsupported top-level operator: {key}")
            elif not self._match_field(self._resolve(document, key), value):
                return False

        return True

    def _match_field(self, actual: Any, condition: Any) -> bool:
        """Match one field value against a literal or an operator dict."""
        if isinstance(condition, dict) and condition and all(
            k.startswith("$") for k in condition
        ):
            return all(
                self._apply_operator(op, actual, operand)
                for op, operand in condition.items()
            )
        # Literal equality; a missing field only equals None
        if actual is _MISSING:
            return condition is None
        return actual == condition

    def _apply_operator(self, op: str, actual: Any, operand: Any) -> bool:
        if op not in self.COMPARISON_OPS:
            raise ValidationError(f"Unsupported operator: {op}")

        if op == "$exists":
            return (actual is not _MISSING) == bool(operand)

        if op == "$eq":
            return operand is None if actual is _MISSING else actual == operand
        if op == "$ne":
            return operand is not None if actual is _MISSING else actual != operand

        if op in ("$in", "$nin"):
            if not isinstance(operand, (list, tuple, set)):
                raise ValidationError(f"{op} expects a list, got {type(operand).__name__}")
            value = None if actual is _MISSING else actual
            found = value in operand
            return found if op == "$in" else not found

        # Range operators never match missing or null values
        if actual is _MISSING or actual is None:
            return False
        try:
            if op == "$gt":
                return actual > operand
            if op == "$gte":
                return actual >= operand
            if op == "$lt":
                return actual < operand
            return actual <= operand
        except TypeError:
            return False

    @staticmethod
    def _resolve(document: Dict[str, Any], key: str) -> Any:
        """Fetch a possibly dotted field, _MISSING when absent."""
        current: Any = document
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return _MISSING
            current = current[part]
        return current


def sort_key(value: Any) -> Tuple[int, Any]:
    """Total ordering over mixed values: null, numbers, strings, the rest.

    Mirrors MongoDB's cross-type sort order closely enough for ordering
    siblings and coordinate scans.
    """
    if value is None or value is _MISSING:
        return (0, 0)
    if isinstance(value, bool):
        return (3, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (4, str(value))


def field_value(document: Dict[str, Any], key: str) -> Any:
    """Public accessor for dotted fields (None when absent)."""
    value = FilterMatcher._resolve(document, key)
    return None if value is _MISSING else value


def matches(document: Dict[str, Any], filter_dict: Optional[Dict[str, Any]]) -> bool:
    """Convenience function for one-off checks."""
    return FilterMatcher().matches(document, filter_dict)


def filter_documents(
    documents: List[Dict[str, Any]],
    filter_dict: Optional[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Return the documents matching ``filter_dict``, order preserved."""
    matcher = FilterMatcher()
    return [doc for doc in documents if matcher.matches(doc, filter_dict)]
