"""
Core infrastructure modules for the content importer.

Provides common utilities used across the package:
- exceptions: Standardized exception hierarchy
- http: Blocking HTTP client with transport retries
- storage: Credential store and transient cache protocols
- events: Synchronous event emitter

The service container lives in ``content_importer.core.container``.
"""

from content_importer.core.exceptions import (
    ImporterError,
    RetryableError,
    PermanentError,
    ConfigurationError,
    FieldError,
    ErrorSet,
    ValidationError,
    MissingRequiredFieldError,
    AdapterError,
    AuthenticationRequiredError,
    DuplicateAdapterError,
    AdapterNotFoundError,
    ExportFileError,
    ParseError,
    NormalizerNotFoundError,
    MediaAlreadyImportedError,
    HttpRequestError,
    HttpTransportError,
)
from content_importer.core.events import (
    ADAPTER_REGISTERED,
    ADAPTER_UNREGISTERED,
    EventEmitter,
)
from content_importer.core.http import HttpClient, HttpResponse
from content_importer.core.storage import (
    InMemoryCache,
    InMemoryKeyValueStore,
    KeyValueStore,
    TransientCache,
)

__all__ = [
    # Exceptions
    "ImporterError",
    "RetryableError",
    "PermanentError",
    "ConfigurationError",
    "FieldError",
    "ErrorSet",
    "ValidationError",
    "MissingRequiredFieldError",
    "AdapterError",
    "AuthenticationRequiredError",
    "DuplicateAdapterError",
    "AdapterNotFoundError",
    "ExportFileError",
    "ParseError",
    "NormalizerNotFoundError",
    "MediaAlreadyImportedError",
    "HttpRequestError",
    "HttpTransportError",
    # Events
    "ADAPTER_REGISTERED",
    "ADAPTER_UNREGISTERED",
    "EventEmitter",
    # HTTP
    "HttpClient",
    "HttpResponse",
    # Storage
    "InMemoryCache",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "TransientCache",
]
