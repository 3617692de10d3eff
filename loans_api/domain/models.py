"""Domain models - plain dataclasses shared by the dispatcher and the client"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

# Error codes placed under {"errors": {"base": [...]}} by the client itself
UNEXPECTED_RESPONSE = "unexpected_response"
CANT_FETCH_LOAN_REQUEST_TERMS = "cant_fetch_loan_request_terms"

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Result:
    """Outcome of a single API call"""

    success: bool
    payload: Any = None

    @classmethod
    def failure(cls, code: str) -> "Result":
        return cls(success=False, payload={"errors": {"base": [code]}})

    @property
    def errors(self) -> Dict[str, Any]:
        """Field -> messages mapping of a failed call, empty for successes"""
        if self.success or not isinstance(self.payload, dict):
            return {}
        return self.payload.get("errors") or {}

    def parse_as(self, model: Type[ModelT]) -> ModelT:
        """
        Validate a success payload into a typed response schema.

        Raises:
            ValueError: When called on a failed result
            pydantic.ValidationError: When the payload does not match the schema
        """
        if not self.success:
            raise ValueError(f"Cannot parse a failed result: {self.errors}")
        return model.model_validate(self.payload)


@dataclass(frozen=True)
class SessionState:
    """Credentials carried between calls: the session and the current loan request"""

    session_token: Optional[str] = None
    loan_request_token: Optional[str] = None

    def with_session_token(self, token: Optional[str]) -> "SessionState":
        return replace(self, session_token=token)

    def with_loan_request_token(self, token: Optional[str]) -> "SessionState":
        return replace(self, loan_request_token=token)
