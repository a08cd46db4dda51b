"""Error taxonomy shared by the auth and data flows.

Every failed response from the Oculog API is run through ``classify_error``,
which reads the backend's error envelope::

    {"type": "duplicate_date", "message": "...", "data": {"existing_log_id": "..."}}

and falls back to a status-code guess when the body is not an envelope.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError


class ApiErrorType(str, Enum):
    """Error kinds matching the backend's ErrorType enum."""
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHORIZED = "unauthorized"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    DUPLICATE_DATE = "duplicate_date"
    VALIDATION_ERROR = "validation_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    BAD_GATEWAY = "bad_gateway"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str) -> "ApiErrorType":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class JsonKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


@dataclass(frozen=True)
class JsonValue:
    """
    A decoded JSON value tagged with its kind.

    Objects hold ``dict[str, JsonValue]`` and arrays ``list[JsonValue]``,
    so nested context in an error's ``data`` stays introspectable.
    """

    kind: JsonKind
    value: Any = None

    @classmethod
    def from_python(cls, raw: Any) -> "JsonValue":
        # bool is a subclass of int, check it first
        if raw is None:
            return cls(JsonKind.NULL)
        if isinstance(raw, bool):
            return cls(JsonKind.BOOLEAN, raw)
        if isinstance(raw, (int, float)):
            return cls(JsonKind.NUMBER, raw)
        if isinstance(raw, str):
            return cls(JsonKind.STRING, raw)
        if isinstance(raw, dict):
            return cls(JsonKind.OBJECT, {str(k): cls.from_python(v) for k, v in raw.items()})
        if isinstance(raw, (list, tuple)):
            return cls(JsonKind.ARRAY, [cls.from_python(v) for v in raw])
        raise TypeError(f"Not a JSON value: {type(raw).__name__}")

    def as_str(self) -> Optional[str]:
        return self.value if self.kind == JsonKind.STRING else None

    def as_bool(self) -> Optional[bool]:
        return self.value if self.kind == JsonKind.BOOLEAN else None

    def as_float(self) -> Optional[float]:
        return float(self.value) if self.kind == JsonKind.NUMBER else None

    def as_int(self) -> Optional[int]:
        if self.kind == JsonKind.NUMBER and float(self.value).is_integer():
            return int(self.value)
        return None

    def get(self, key: str) -> Optional["JsonValue"]:
        """Member lookup on an object value."""
        if self.kind != JsonKind.OBJECT:
            return None
        return self.value.get(key)

    def to_python(self) -> Any:
        if self.kind == JsonKind.OBJECT:
            return {k: v.to_python() for k, v in self.value.items()}
        if self.kind == JsonKind.ARRAY:
            return [v.to_python() for v in self.value]
        return self.value


class ErrorEnvelope(BaseModel):
    """Error body sent by the backend for 4xx/5xx responses."""

    type: str
    message: str
    data: Optional[dict[str, Any]] = None


class ApiError(Exception):
    """Base class for all client-side API failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(ApiError):
    """The request never got a response (DNS, refused, timeout...)."""


class InvalidResponseError(ApiError):
    """A successful response whose body could not be decoded."""

    def __init__(self, message: str = "Invalid response from server"):
        super().__init__(message)


class ClassifiedError(ApiError):
    """A failed response mapped onto ``ApiErrorType``."""

    def __init__(
        self,
        kind: ApiErrorType,
        message: str,
        data: Optional[dict[str, JsonValue]] = None,
        status_code: Optional[int] = None,
        from_envelope: bool = False,
    ):
        super().__init__(message)
        self.kind = kind
        self.data = data
        self.status_code = status_code
        self.from_envelope = from_envelope

    def __repr__(self) -> str:
        return f"ClassifiedError(kind={self.kind.value!r}, message={self.message!r}, status_code={self.status_code})"

    def _data_str(self, key: str) -> Optional[str]:
        if not self.data or key not in self.data:
            return None
        return self.data[key].as_str()

    @property
    def existing_log_id(self) -> Optional[UUID]:
        """Id of the log that already exists for the date (duplicate_date)."""
        raw = self._data_str("existing_log_id")
        if raw is None:
            return None
        try:
            return UUID(raw)
        except ValueError:
            return None

    @property
    def resource_id(self) -> Optional[str]:
        return self._data_str("id")

    @property
    def resource_type(self) -> Optional[str]:
        return self._data_str("resource")


def _status_fallback(status_code: int) -> ApiErrorType:
    if status_code in (400, 422):
        return ApiErrorType.VALIDATION_ERROR
    if status_code == 401:
        return ApiErrorType.UNAUTHORIZED
    if status_code == 403:
        return ApiErrorType.FORBIDDEN
    if status_code == 404:
        return ApiErrorType.NOT_FOUND
    if status_code == 502:
        return ApiErrorType.BAD_GATEWAY
    if status_code == 503:
        return ApiErrorType.SERVICE_UNAVAILABLE
    if status_code >= 500:
        return ApiErrorType.SERVER_ERROR
    return ApiErrorType.UNKNOWN


def classify_error(body: Union[bytes, str, None], status_code: int) -> ClassifiedError:
    """
    Map a failed response body and status onto a ``ClassifiedError``.

    Structured envelopes keep their message and ``data``; anything else is
    classified by status code with the raw body text as the message.
    """
    if isinstance(body, bytes):
        text = body.decode("utf-8", errors="replace")
    else:
        text = body or ""

    try:
        envelope = ErrorEnvelope.model_validate_json(text)
    except ValidationError:
        envelope = None

    if envelope is not None:
        data = None
        if envelope.data is not None:
            data = {k: JsonValue.from_python(v) for k, v in envelope.data.items()}
        return ClassifiedError(
            kind=ApiErrorType.parse(envelope.type),
            message=envelope.message,
            data=data,
            status_code=status_code,
            from_envelope=True,
        )

    return ClassifiedError(
        kind=_status_fallback(status_code),
        message=text or f"HTTP {status_code}",
        status_code=status_code,
    )


class AuthErrorKind(str, Enum):
    """The narrower error set surfaced by the authentication flows."""
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    UNAUTHORIZED = "unauthorized"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"


class AuthError(ApiError):
    """Failure of login, signup, refresh or the identity check."""

    def __init__(self, kind: AuthErrorKind, status_code: Optional[int] = None, message: Optional[str] = None):
        super().__init__(message or self._default_message(kind, status_code))
        self.kind = kind
        self.status_code = status_code

    @staticmethod
    def _default_message(kind: AuthErrorKind, status_code: Optional[int]) -> str:
        if kind == AuthErrorKind.INVALID_CREDENTIALS:
            return "Invalid email or password"
        if kind == AuthErrorKind.EMAIL_ALREADY_EXISTS:
            return "Email already registered"
        if kind == AuthErrorKind.UNAUTHORIZED:
            return "Session expired, please log in again"
        if kind == AuthErrorKind.NETWORK_ERROR:
            return "Unable to reach the server"
        return f"Server error ({status_code})" if status_code else "Server error"

    @classmethod
    def from_classified(cls, error: ClassifiedError) -> "AuthError":
        """Narrow a classified error to the auth error set."""
        if error.from_envelope:
            mapping = {
                ApiErrorType.INVALID_CREDENTIALS: AuthErrorKind.INVALID_CREDENTIALS,
                ApiErrorType.EMAIL_ALREADY_EXISTS: AuthErrorKind.EMAIL_ALREADY_EXISTS,
                ApiErrorType.UNAUTHORIZED: AuthErrorKind.UNAUTHORIZED,
            }
            kind = mapping.get(error.kind, AuthErrorKind.SERVER_ERROR)
        elif error.status_code == 401:
            kind = AuthErrorKind.UNAUTHORIZED
        elif error.status_code == 400:
            # Signup rejects an existing email with a bare 400
            kind = AuthErrorKind.EMAIL_ALREADY_EXISTS
        else:
            kind = AuthErrorKind.SERVER_ERROR
        return cls(kind, error.status_code)
