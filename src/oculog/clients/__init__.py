"""Clients for the Oculog API and its collaborators."""

from .api import ApiClient
from .errors import (
    ApiError,
    ApiErrorType,
    AuthError,
    AuthErrorKind,
    ClassifiedError,
    InvalidResponseError,
    JsonKind,
    JsonValue,
    NetworkError,
    classify_error,
)
from .location import IPLocationProvider, LocationError
from .preferences import PreferenceStore
from .tokens import MemorySecretStore, SecretStore, TinyDBSecretStore, TokenKey

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiErrorType",
    "AuthError",
    "AuthErrorKind",
    "ClassifiedError",
    "InvalidResponseError",
    "JsonKind",
    "JsonValue",
    "NetworkError",
    "classify_error",
    "IPLocationProvider",
    "LocationError",
    "PreferenceStore",
    "MemorySecretStore",
    "SecretStore",
    "TinyDBSecretStore",
    "TokenKey",
]
