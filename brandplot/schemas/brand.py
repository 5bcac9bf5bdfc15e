"""Pydantic schemas for brand identifiers and cached brand results."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class IdentifierRequest(BaseModel):
    """Body of ``POST /v1/brand/identifier``."""

    model_config = ConfigDict(populate_by_name=True)

    company_name: str = Field(
        "",
        alias="companyName",
        max_length=200,
        description="Display name of the company. Empty names get a timestamp-based id.",
    )


class IdentifierResponse(BaseModel):
    id_unico: str = Field(..., alias="idUnico", description="Normalized company identifier.")
    remaining: int | None = Field(
        None,
        description="Requests left in the client's rate limit window (null when disabled).",
    )

    model_config = ConfigDict(populate_by_name=True)


class BrandResult(BaseModel):
    """Brand result as the dashboard caches it.

    Field names follow the stored record (camelCase); snake_case names are
    accepted on input. Extra keys are kept since the cache payload is opaque.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id_unico: str = Field(..., alias="idUnico", min_length=1)
    company_name: str = Field(..., alias="companyName")
    diagnostico: str = Field("", description="Generated brand diagnosis text.")
    answers: List[str] = Field(default_factory=list, description="Onboarding questionnaire answers.")
    contact: str | None = Field(None, description="Serialized contact info (phone/email).")
    score_diagnostico: str | None = Field(None, alias="scoreDiagnostico")


class BrandResultUpdate(BaseModel):
    """Partial update for the cached brand result; only sent fields are merged."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id_unico: str | None = Field(None, alias="idUnico", min_length=1)
    company_name: str | None = Field(None, alias="companyName")
    diagnostico: str | None = None
    answers: List[str] | None = None
    contact: str | None = None
    score_diagnostico: str | None = Field(None, alias="scoreDiagnostico")


class CacheWriteResponse(BaseModel):
    ok: bool
    reason: str | None = None
