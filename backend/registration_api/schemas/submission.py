"""Submission request and response schemas."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from registration_api.core.exceptions import ValidationError
from registration_api.services.provinces import Province


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmissionForm(CamelModel):
    """Recognised text fields of a registration submission."""

    province: Province
    builder_name: str | None = None
    competent_person: str | None = None
    property_details: str | None = None
    registration_number: str | None = None
    company_name: str | None = None

    @classmethod
    def field_names(cls) -> set[str]:
        """Form field names (camelCase) this schema accepts."""
        return {info.alias or name for name, info in cls.model_fields.items()}

    @classmethod
    def from_form(cls, data: Mapping[str, str]) -> "SubmissionForm":
        """Build a submission from multipart text fields.

        Blank values are treated as absent. Unrecognised keys are not
        accepted here; the caller decides what to do with them.

        Raises:
            ValidationError: If province is missing or not one of the nine
                recognised names
        """
        values = {
            key: value.strip()
            for key, value in data.items()
            if key in cls.field_names() and value and value.strip()
        }

        province = values.get("province")
        if not province:
            raise ValidationError("Province is required")
        try:
            values["province"] = Province(province)
        except ValueError as e:
            raise ValidationError(f"Invalid province: {province}") from e

        return cls.model_validate(values)

    def to_list_fields(
        self,
        reference_number: str,
        uploaded_file_urls: list[str],
    ) -> dict[str, Any]:
        """Project the submission onto the registration list's columns.

        Absent values are left out so the list applies its own defaults.
        Attachments is a comma-joined string of URLs, present only when at
        least one file was uploaded.
        """
        fields: dict[str, Any] = {
            "Title": self.builder_name,
            "ReferenceNumber": reference_number,
            "Province": self.province.value,
            "CompetentPerson": self.competent_person,
            "PropertyDetails": self.property_details,
            "RegistrationNumber": self.registration_number,
            "CompanyName": self.company_name,
        }
        if uploaded_file_urls:
            fields["Attachments"] = ", ".join(uploaded_file_urls)
        return {key: value for key, value in fields.items() if value is not None}


class SubmissionResponse(CamelModel):
    """Successful submission response."""

    success: bool = True
    message: str = "Form submitted successfully"
    reference_number: str
    item_id: str
    uploaded_file_urls: list[str] = Field(default_factory=list)
    province: str
    partial_failure: bool = False
    failed_files: list[str] = Field(default_factory=list)


class ReferenceResponse(CamelModel):
    """Standalone reference number allocation response."""

    success: bool = True
    reference_number: str


class ErrorResponse(CamelModel):
    """Error response body."""

    success: bool = False
    error: str


class HealthResponse(CamelModel):
    """Health probe response."""

    status: str
    sharepoint_status: str
    site_info: dict[str, str] = Field(default_factory=dict)
    mode: str
    timestamp: str
