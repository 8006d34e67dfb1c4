"""Pydantic schemas for the normalized asset model and API responses."""

import typing as t

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Asset(BaseModel):
    """Normalized market snapshot of one cryptocurrency."""

    model_config = ConfigDict(frozen=True)

    name: str
    symbol: str
    price: t.Annotated[float, Field(ge=0)] = 0.0
    marketCap: t.Annotated[float, Field(ge=0)] = 0.0
    volume24h: t.Annotated[float, Field(ge=0)] = 0.0
    priceChangePercent24h: float = 0.0
    logoUrl: t.Annotated[str, Field(min_length=1)]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def changeDirection(self) -> t.Literal["positive", "negative"]:
        """Classify the 24h change; zero counts as non-negative.

        :return: ``"negative"`` for a drop, ``"positive"`` otherwise.
        """
        return "negative" if self.priceChangePercent24h < 0 else "positive"


class ViewResp(BaseModel):
    """Response schema for the currently rendered view."""

    status: t.Literal["idle", "items", "empty", "error"]
    source: str
    page: t.Annotated[int, Field(ge=1)]
    query: str | None = None
    items: list[Asset] = Field(default_factory=list)
    error: str | None = None
    updatedAt: float | None = None


class SourcesResp(BaseModel):
    """Response schema for the source listing."""

    items: list[str]
    selected: str


class ActionResp(BaseModel):
    """Response schema for tracker actions."""

    ok: bool
    accepted: bool
    view: ViewResp
