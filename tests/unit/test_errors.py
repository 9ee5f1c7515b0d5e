"""Unit tests for the ragapp exception hierarchy."""

from __future__ import annotations

import pytest

from ragapp.utils.errors import (
    AuthError,
    ConfigurationError,
    DimensionMismatchError,
    GenerationError,
    ProviderConnectionError,
    ProviderUnavailableError,
    RagAppError,
    RateLimitError,
    UnsupportedFormatError,
    ValidationError,
    VectorStoreError,
)


@pytest.mark.parametrize(
    "cls",
    [
        ValidationError,
        UnsupportedFormatError,
        ConfigurationError,
        AuthError,
        RateLimitError,
        ProviderUnavailableError,
        ProviderConnectionError,
        GenerationError,
        VectorStoreError,
        DimensionMismatchError,
    ],
)
def test_all_errors_are_ragapp_errors(cls: type[RagAppError]) -> None:
    exc = cls()
    assert isinstance(exc, RagAppError)
    assert exc.message


def test_subclass_relationships() -> None:
    assert issubclass(ProviderConnectionError, ProviderUnavailableError)
    assert issubclass(DimensionMismatchError, VectorStoreError)
    assert not issubclass(AuthError, ProviderUnavailableError)


def test_str_includes_provider_name() -> None:
    exc = RateLimitError("slow down", provider_name="openai")
    assert str(exc) == "[openai] slow down"
    assert exc.message == "slow down"
    assert exc.provider_name == "openai"


def test_str_without_provider_name() -> None:
    assert str(ValidationError("bad input")) == "bad input"
