from __future__ import annotations


class LeadFormError(Exception):
    pass


class MalformedConfigError(LeadFormError):
    """Raised when a stored configuration fails the structural check."""


class InvalidFormError(LeadFormError):
    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems


class FieldNotFoundError(LeadFormError, KeyError):
    def __init__(self, field_id: str) -> None:
        super().__init__(field_id)
        self.field_id = field_id

    def __str__(self) -> str:
        return f"Field not found: {self.field_id}"


class SessionClosedError(LeadFormError):
    pass
