"""Pydantic data models for companies.devby.io records."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from devby.common.data_models import ScrapedData


class CompanyShort(ScrapedData):
    """One row of the companies index table.

    Carries the fields the detail page does not repeat (reviews, employees)
    so they can be merged onto the final record.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., description="Company name as listed in the index")
    url: str = Field(..., description="Absolute URL of the company page")
    rating: float | None = Field(None, description="Average rating")
    employees: int = Field(0, description="Employee count column")
    reviews: int = Field(0, description="Number of reviews")


class EmployeesDetails(ScrapedData):
    """Employee counts from the company header. Any of them may be absent."""

    total: int | None = Field(None, alias="total")
    in_belarus: int | None = Field(None, alias="inBelarus")
    in_belarus_non_it: int | None = Field(None, alias="inBelarusNonIT")


class Contacts(ScrapedData):
    email: str
    phone: str
    website: str


class Agent(ScrapedData):
    """A company representative on the site."""

    name: str
    link: str
    position: str


class Worker(ScrapedData):
    name: str
    link: str


class Workers(ScrapedData):
    actual: list[Worker] = Field(default_factory=list)
    former: list[Worker] = Field(default_factory=list)


class CompanyDetails(ScrapedData):
    """Everything parsed from a company detail page."""

    name: str = Field(..., description="Company name from the page header")
    legal_name: str = Field(..., alias="legalName")
    tags: list[str] = Field(default_factory=list)
    foundation_year: int | None = Field(None, alias="foundationYear")
    employees_details: EmployeesDetails | None = Field(
        None, alias="employeesDetails"
    )
    description: str = ""
    rating: float | None = None
    contacts: Contacts
    address: str | None = None
    views: int = 0
    agents: list[Agent] = Field(default_factory=list)
    workers: Workers = Field(default_factory=Workers)


class Company(CompanyDetails):
    """The persisted record: detail fields plus the index-only fields."""

    url: str = Field(..., description="Absolute URL of the company page")
    reviews: int = Field(0, description="Number of reviews")
    employees: int = Field(0, description="Employee count column")

    @classmethod
    def merge(cls, target: CompanyShort, details: CompanyDetails) -> Company:
        """Combine an index row with its detail page.

        Detail values win where both define a field (name, rating).
        """
        return cls(
            **details.model_dump(),
            url=target.url,
            reviews=target.reviews,
            employees=target.employees,
        )

    def to_json_dict(self) -> dict[str, Any]:
        data = super().to_json_dict()
        # Missing sub-counts are left out rather than written as null
        if data["employeesDetails"] is not None:
            data["employeesDetails"] = {
                key: value
                for key, value in data["employeesDetails"].items()
                if value is not None
            }
        return data
