"""Deferred validation for extracted records.

The scraper collects raw strings from the page into a DeferredValidation
and only then validates them against the pydantic model, so that a bad
value is reported with the page URL and the whole raw document.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from devby.common.exceptions import (
    DataFormatAssumptionException,
)

T = TypeVar("T", bound=BaseModel)


class DeferredValidation(Generic[T]):
    """Wrapper for unvalidated data that validates on confirm().

    Example:
        deferred = CompanyDetails.raw(request_url=url, name=name, views="12")
        details = deferred.confirm()  # Raises if invalid
    """

    def __init__(
        self,
        model_class: type[T],
        request_url: str = "",
        **data: Any,
    ) -> None:
        self._model_class = model_class
        self._request_url = request_url
        self._data = data

    def confirm(self) -> T:
        """Validate the data and return the validated model instance.

        Raises:
            DataFormatAssumptionException: If validation fails.
        """
        try:
            return self._model_class.model_validate(self._data)
        except ValidationError as e:
            errors_list = [dict(err) for err in e.errors()]
            raise DataFormatAssumptionException(
                errors=errors_list,
                failed_doc=self._data,
                model_name=self._model_class.__name__,
                request_url=self._request_url,
            ) from e
