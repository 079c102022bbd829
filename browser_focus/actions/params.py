"""
Input models: Pydantic v2 constraints for every registered action.
Validating at the script -> executor boundary stops bad data before the
browser is touched and gives one error shape for the CLI.
"""
# @file purpose: Define parameter schemas for actions using Pydantic v2.

from typing import Annotated, Any

from pydantic import AnyHttpUrl, BaseModel, Field, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TimeoutMs = Annotated[int, Field(gt=0, le=600_000)]
TextLimited = Annotated[str, Field(max_length=4000)]


class OpenUrlParams(BaseModel):
    """Parameters for open_url / open_window."""

    url: AnyHttpUrl


class WaitForParams(BaseModel):
    selector: NonEmptyStr
    timeout_ms: TimeoutMs | None = 10_000


class ClickParams(BaseModel):
    selector: NonEmptyStr


class TypeParams(BaseModel):
    selector: NonEmptyStr
    text: TextLimited


class ExtractTextParams(BaseModel):
    selector: NonEmptyStr
    attribute: str | None = Field(default=None, description="Read this attribute instead of text")


class ContainsParams(BaseModel):
    text: str = Field(..., min_length=1)
    case_sensitive: bool = True
    expect: bool | None = Field(default=None, description="Fail unless the result equals this")


class SnapshotParams(BaseModel):
    path: str = Field(..., description="Where to save PNG file")
    full_page: bool = True


class FocusWindowParams(BaseModel):
    """Exactly one of index / query (title or URL)."""

    index: int | None = None
    query: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _one_target(self) -> "FocusWindowParams":
        if (self.index is None) == (self.query is None):
            raise ValueError("give exactly one of 'index' or 'query'")
        return self


class WaitForWindowParams(BaseModel):
    count: int | None = Field(default=None, ge=1)
    timeout_ms: TimeoutMs | None = None


class FocusFrameParams(BaseModel):
    """Exactly one of index / name (name or id) / selector (the iframe element)."""

    index: int | None = Field(default=None, ge=0)
    name: str | None = Field(default=None, min_length=1)
    selector: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _one_ref(self) -> "FocusFrameParams":
        given = [v for v in (self.index, self.name, self.selector) if v is not None]
        if len(given) != 1:
            raise ValueError("give exactly one of 'index', 'name' or 'selector'")
        return self


class ScriptParams(BaseModel):
    script: str = Field(..., min_length=1)
    args: list[Any] = Field(default_factory=list)
    timeout_ms: TimeoutMs | None = None


class AcceptDialogParams(BaseModel):
    prompt_text: str | None = None


class PauseParams(BaseModel):
    ms: int = Field(..., ge=0, le=600_000)
