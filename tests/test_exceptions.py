"""Tests for the bridge exception hierarchy and its HTTP mapping."""

import warnings

from wopi_bridge.exceptions import (
    BackendError,
    BackendUnavailableError,
    BadRequestError,
    BridgeError,
    ConfigurationError,
    ObjectNotFoundError,
    PayloadTooLargeError,
    StorageError,
    TokenNotFoundError,
    UnauthorizedError,
)
from services.api.exception_handlers import status_for


def test_bridge_error_base():
    error = BridgeError("Test error", {"key": "value"})
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.details == {"key": "value"}


def test_details_default_to_empty_dict():
    assert ConfigurationError("Config missing").details == {}


def test_storage_error_hierarchy():
    assert issubclass(BackendUnavailableError, StorageError)
    assert issubclass(BackendError, StorageError)
    assert issubclass(StorageError, BridgeError)
    assert not issubclass(ObjectNotFoundError, StorageError)


def test_status_mapping():
    assert status_for(UnauthorizedError("missing token")) == 401
    assert status_for(BadRequestError("Missing file path")) == 400
    assert status_for(ObjectNotFoundError("gone")) == 404
    assert status_for(PayloadTooLargeError("big")) == 413
    assert status_for(BackendUnavailableError("down")) == 500
    assert status_for(BackendError("boom")) == 500


def test_token_miss_is_not_exposed_as_its_own_status():
    # the gate converts it to UnauthorizedError before it reaches a handler
    assert status_for(TokenNotFoundError("unknown")) == 500


def test_status_mapping_emits_no_deprecation_warnings():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        for exc in (UnauthorizedError("x"), PayloadTooLargeError("x"), BackendError("x")):
            status_for(exc)
