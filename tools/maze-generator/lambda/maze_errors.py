from typing import Any, Dict, Optional


class MazeServiceError(Exception):
    """Base for every failure reported back to the caller."""

    error_type = "MazeServiceError"
    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "errorType": self.error_type, "error": str(self)}


class InvalidBodyError(MazeServiceError):
    error_type = "InvalidBody"
    status_code = 400


class DecodeError(MazeServiceError, ValueError):
    """
    Structured decoding of the request body failed.

    kind is one of: missing_field, type_mismatch, unrecognized_token,
    duplicate_field, invalid_json. field is the dotted path of the offending
    field, or None when the body as a whole is at fault.
    """

    error_type = "DecodeFailure"
    status_code = 400

    def __init__(self, field: Optional[str], kind: str, reason: str):
        self.field = field
        self.kind = kind
        self.reason = reason
        prefix = f"{field}: " if field else ""
        super().__init__(f"{prefix}{reason}")

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["field"] = self.field
        out["reason"] = self.kind
        return out


class EngineError(MazeServiceError, RuntimeError):
    error_type = "EngineFailure"
    status_code = 502


class UnsupportedOutputError(MazeServiceError):
    error_type = "UnsupportedOutput"
    status_code = 500
