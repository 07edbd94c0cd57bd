"""Typed message content items."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class UsageDetails(BaseModel):
    """Token accounting reported by a provider."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None

    def __add__(self, other: "UsageDetails") -> "UsageDetails":
        def _sum(a: int | None, b: int | None) -> int | None:
            if a is None and b is None:
                return None
            return (a or 0) + (b or 0)

        return UsageDetails(
            input_tokens=_sum(self.input_tokens, other.input_tokens),
            output_tokens=_sum(self.output_tokens, other.output_tokens),
            total_tokens=_sum(self.total_tokens, other.total_tokens),
        )


class TextContent(BaseModel):
    """Plain text produced by or sent to a model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str = ""


class FunctionCallContent(BaseModel):
    """A tool invocation announced by the model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["function_call"] = "function_call"
    call_id: str | None = None
    name: str
    arguments: Any = None


class FunctionResultContent(BaseModel):
    """The result of a tool invocation."""

    model_config = ConfigDict(frozen=True)

    type: Literal["function_result"] = "function_result"
    call_id: str | None = None
    result: Any = None


class UsageContent(BaseModel):
    """Usage metadata carried in-band by a response fragment."""

    model_config = ConfigDict(frozen=True)

    type: Literal["usage"] = "usage"
    details: UsageDetails = Field(default_factory=UsageDetails)


class DataContent(BaseModel):
    """Binary payload referenced by URI (data: URIs included)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["data"] = "data"
    uri: str
    media_type: str | None = None


Content = Annotated[
    TextContent | FunctionCallContent | FunctionResultContent | UsageContent | DataContent,
    Field(discriminator="type"),
]
