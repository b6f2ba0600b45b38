"""Typed wire models for the restaurant server API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MenuItem(BaseModel):
    """One dish as listed by `GET /menu`."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: int = Field(alias="id", description="1-based menu position used for ordering")
    name: str
    prep_minutes: int = Field(alias="prepTime", description="Preparation time in minutes")


class OrderRequest(BaseModel):
    """Body for `POST /order`."""

    customer: str
    dish_ids: list[int] = Field(min_length=1)


class OrderConfirmation(BaseModel):
    """Successful order submission response."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: int | str = Field(alias="id")
    customer: str
    items: list[str] = Field(default_factory=list)
    prep_minutes: float = Field(alias="prepTime", allow_inf_nan=False)
    queue_minutes: float = Field(default=0, alias="queueTime")
    total_wait_minutes: float = Field(alias="totalWaitTime")
    cancel_window_minutes: float = Field(alias="cancelWindow", allow_inf_nan=False)


class FeedbackSubmission(BaseModel):
    """Body for `POST /feedback`."""

    customer: str
    comment: str = Field(min_length=1)


class FeedbackAck(BaseModel):
    """Server acknowledgement for a feedback submission."""

    status: str = "Feedback received."
