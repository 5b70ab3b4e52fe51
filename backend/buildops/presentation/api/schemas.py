"""
Request bodies for the REST API.

The models only describe the wire shape. Business rules such as lengths,
allowed file types and status transitions are enforced by the command
validators and the domain, so their error codes reach the client intact.
"""

import base64
import binascii
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buildops.core.domain.ports import UploadedFile


class ApiRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)


class FileUpload(ApiRequest):
    """A file sent inline as base64."""

    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1)
    content: str = Field(..., description="Base64-encoded file content")

    @field_validator("content")
    @classmethod
    def check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("content must be valid base64") from e
        return value

    def to_uploaded_file(self) -> UploadedFile:
        return UploadedFile(
            filename=self.filename,
            content_type=self.content_type,
            content=base64.b64decode(self.content),
        )


# =====================================================================================
# QUOTES
# =====================================================================================


class SubmitQuoteRequest(ApiRequest):
    customer_name: str
    email: str
    phone: str
    service_type: str
    description: str
    photos: list[FileUpload] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SendQuoteRequest(ApiRequest):
    estimated_value: Decimal
    notes: str | None = Field(None, max_length=2000)
    valid_until: datetime | None = None


class UpdatePriorityRequest(ApiRequest):
    priority: str
    reason: str | None = Field(None, max_length=500)


class RejectQuoteRequest(ApiRequest):
    reason: str
    notify_customer: bool = True


class AcceptQuoteRequest(ApiRequest):
    customer_signature: str | None = None


# =====================================================================================
# JOB APPLICATIONS
# =====================================================================================


class SubmitJobApplicationRequest(ApiRequest):
    applicant_name: str
    email: str
    phone: str
    experience_level: str
    experience_description: str
    resume: FileUpload | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ScheduleInterviewRequest(ApiRequest):
    interview_date: datetime


class ApproveApplicationRequest(ApiRequest):
    notes: str | None = Field(None, max_length=2000)


class RejectApplicationRequest(ApiRequest):
    reason: str


class WithdrawApplicationRequest(ApiRequest):
    reason: str | None = Field(None, max_length=1000)


__all__ = [
    "AcceptQuoteRequest",
    "ApproveApplicationRequest",
    "FileUpload",
    "RejectApplicationRequest",
    "RejectQuoteRequest",
    "ScheduleInterviewRequest",
    "SendQuoteRequest",
    "SubmitJobApplicationRequest",
    "SubmitQuoteRequest",
    "UpdatePriorityRequest",
    "WithdrawApplicationRequest",
]
