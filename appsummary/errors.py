"""Error types raised by the control-plane client and the summary actor."""

from typing import Iterable


class ControlPlaneError(RuntimeError):
    """Represents failures when communicating with the control-plane API."""

    def __init__(
        self,
        message: str,
        *,
        warnings: Iterable[str] = (),
        status_code: int | None = None,
        error_code: str = "",
    ) -> None:
        super().__init__(message)
        self.warnings = list(warnings)
        self.status_code = status_code
        self.error_code = error_code

    def with_prior_warnings(self, prior: Iterable[str]) -> "ControlPlaneError":
        """Return a copy of this error, same type, whose warnings start with ``prior``."""
        return type(self)(
            str(self),
            warnings=[*prior, *self.warnings],
            status_code=self.status_code,
            error_code=self.error_code,
        )


class ResourceNotFoundError(ControlPlaneError):
    """The requested resource does not exist (HTTP 404)."""


class StatsUnavailableError(ControlPlaneError):
    """Instance stats cannot be reported because the app is stopped or transitioning."""


class ApplicationNotFoundError(RuntimeError):
    """No application with the given name exists in the scope."""

    def __init__(self, name: str, *, warnings: Iterable[str] = ()) -> None:
        super().__init__(f"Application '{name}' not found.")
        self.name = name
        self.warnings = list(warnings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApplicationNotFoundError):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self), self.name))
