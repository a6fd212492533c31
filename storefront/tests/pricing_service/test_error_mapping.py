import importlib
import warnings

import pytest

from storefront.pricing_service.app.api import errors as api_errors
from storefront.pricing_service.app.errors import (
    Conflict,
    EmptyCategory,
    InvalidPercent,
    NoActiveRules,
    PricingError,
    RepositoryUnavailable,
)


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (EmptyCategory("canned"), 404),
        (NoActiveRules(), 409),
        (Conflict(3), 409),
        (InvalidPercent(), 422),
        (RepositoryUnavailable(), 503),
        (PricingError(), 500),
    ],
)
def test_engine_errors_map_to_status_codes(error: PricingError, status_code: int) -> None:
    error.updated_count = 2

    exc = api_errors.to_http_exception(error)

    assert exc.status_code == status_code
    assert exc.detail == {"message": error.message, "updatedCount": 2}


def test_error_mapping_imports_without_deprecation_warnings() -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        importlib.reload(api_errors)
