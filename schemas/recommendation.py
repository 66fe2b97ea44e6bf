from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecommendationReason(BaseModel):
    """Per-factor contribution to a recommendation score."""

    model_config = ConfigDict(extra="ignore")

    action: float = 0.0
    rating_delta: float = 0.0
    target_momentum: float = 0.0
    broker_weight: float = 0.0
    consensus30d: float = 0.0
    recency_days: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v


class Recommendation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ticker: str
    score: float = 0.0
    # Expected BUY / HOLD / SELL; other values are passed through.
    decision: str = ""
    company: str = ""
    broker_top: str = ""
    reason: RecommendationReason = Field(default_factory=RecommendationReason)

    @field_validator("ticker", mode="before")
    @classmethod
    def _ticker(cls, v: Any) -> str:
        sym = "" if v is None else str(v).strip().upper()
        if not sym:
            raise ValueError("ticker must be non-empty")
        return sym

    @field_validator("decision", mode="before")
    @classmethod
    def _decision(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("company", "broker_top", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("reason", mode="before")
    @classmethod
    def _reason(cls, v: Any) -> Any:
        return {} if v is None else v


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    generated_at: Optional[str] = None
    window_days: Optional[int] = None
    universe: Optional[int] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
