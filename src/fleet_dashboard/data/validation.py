from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Type, TypeVar

from pydantic import ValidationError

from fleet_dashboard.data.models import FleetBaseModel
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=FleetBaseModel)


@dataclass(slots=True)
class ValidationIssue:
    """Represents a schema validation failure for a Fleet payload."""

    resource: str
    message: str
    detail: str | None = None
    fields: tuple[str, ...] = field(default_factory=tuple)


class ResponseValidator:
    """Validate Fleet API payloads against the expected models."""

    def __init__(
        self,
        resource: str,
        *,
        issue_callback: Callable[[ValidationIssue], None] | None = None,
    ) -> None:
        self._resource = resource
        self._issue_callback = issue_callback
        self._issues: list[ValidationIssue] = []

    def parse(
        self,
        model: Type[ModelT],
        payload: Any,
    ) -> ModelT | None:
        """Validate a single payload, returning ``None`` when it does not fit."""

        if not isinstance(payload, dict):
            issue = ValidationIssue(
                resource=self._resource,
                message="Fleet payload is not a JSON object",
                detail=type(payload).__name__,
            )
            self._record_issue(issue, errors=None)
            return None
        try:
            return model.from_api(payload)
        except ValidationError as exc:
            fields = tuple(
                ".".join(str(segment) for segment in error.get("loc", ()))
                for error in exc.errors()
            )
            issue = ValidationIssue(
                resource=self._resource,
                message="Fleet payload failed schema validation",
                detail=exc.json(),
                fields=fields,
            )
            self._record_issue(issue, errors=exc.errors())
            return None

    def issues(self) -> list[ValidationIssue]:
        return list(self._issues)

    def reset(self) -> None:
        self._issues.clear()

    def _record_issue(self, issue: ValidationIssue, *, errors: object) -> None:
        self._issues.append(issue)
        field_list = ", ".join(issue.fields) if issue.fields else "unknown"
        logger.warning(
            "Fleet payload validation failed",
            resource=self._resource,
            fields=field_list,
            errors=errors,
        )
        if self._issue_callback is not None:
            try:
                self._issue_callback(issue)
            except Exception:  # pragma: no cover - callbacks should not break validation
                logger.exception("Validation issue callback raised an exception")


__all__: List[str] = ["ResponseValidator", "ValidationIssue"]
