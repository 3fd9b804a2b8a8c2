"""Pydantic base model for scraped data.

Output files use the camelCase keys of the site's original JSON export
(``legalName``, ``foundationYear``...), while Python code uses snake_case.
Every model therefore declares an alias per field and accepts both forms.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

from devby.common.deferred_validation import (
    DeferredValidation,
)

T = TypeVar("T", bound="ScrapedData")


class ScrapedData(BaseModel):
    """Base class for scraped data with deferred validation support.

    Example:
        # Normal usage (validates immediately)
        data = Contacts(email="a@b.by", phone="+375", website="https://b.by")

        # Deferred validation
        deferred = Contacts.raw(request_url=url, email=..., phone=..., website=...)
        validated = deferred.confirm()  # Validates later
    """

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def raw(
        cls: type[T], request_url: str = "", **data: Any
    ) -> DeferredValidation[T]:
        """Create a DeferredValidation wrapper with raw, unvalidated data."""
        return DeferredValidation(cls, request_url, **data)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using the camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)
