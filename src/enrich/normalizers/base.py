"""Abstract base class for API response normalizers."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Normalizer(ABC, Generic[T]):
    """Base class for API response normalizers.

    Normalizers turn untyped JSON from the hosting platform into our frozen
    models, filling safe defaults for anything optional or missing.
    """

    @abstractmethod
    def normalize(self, api_response: dict[str, Any]) -> T:
        """Convert one API response object into a model.

        Args:
            api_response: Raw decoded JSON object

        Returns:
            The model instance

        Raises:
            ValueError: If required fields are missing or malformed
        """
        pass

    def _safe_get(self, data: Any, *keys: str, default: Any = None) -> Any:
        """Safely navigate nested dictionary keys.

        Example:
            >>> self._safe_get({'user': {'login': 'octocat'}}, 'user', 'login')
            'octocat'
            >>> self._safe_get({'user': None}, 'user', 'login', default='unknown')
            'unknown'
        """
        current = data
        for key in keys:
            if isinstance(current, dict) and current.get(key) is not None:
                current = current[key]
            else:
                return default
        return current

    def _require_int(self, data: dict[str, Any], key: str) -> int:
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Expected integer '{key}' in API response, got {value!r}")
        return value


def epoch_to_iso(seconds: Any) -> str | None:
    """Convert a Unix timestamp to an ISO-8601 UTC string.

    Example:
        >>> epoch_to_iso(1700000000)
        '2023-11-14T22:13:20+00:00'
        >>> epoch_to_iso("soon") is None
        True
    """
    try:
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc).isoformat()
    except (TypeError, ValueError, OverflowError, OSError):
        return None
