"""Request and response bodies for the relationship endpoints."""

from __future__ import annotations

from typing import Annotated, ClassVar

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field, model_validator


def _check_email_syntax(value: str) -> str:
    # Only the shape is checked; the address is kept verbatim because emails
    # are matched case-sensitively.
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"invalid email format: {value}") from exc
    return value


EmailAddress = Annotated[str, Field(min_length=1, max_length=255), AfterValidator(_check_email_syntax)]


class FriendPairRequest(BaseModel):
    friends: list[EmailAddress] = Field(min_length=2, max_length=2)


class FriendListRequest(BaseModel):
    email: EmailAddress


class DirectedPairRequest(BaseModel):
    same_user_message: ClassVar[str] = "requestor and target cannot be the same"

    requestor: EmailAddress
    target: EmailAddress

    @model_validator(mode="after")
    def _reject_same_user(self) -> DirectedPairRequest:
        if self.requestor == self.target:
            raise ValueError(self.same_user_message)
        return self


class SubscriptionRequest(DirectedPairRequest):
    pass


class BlockRequest(DirectedPairRequest):
    same_user_message: ClassVar[str] = "cannot block yourself"


class RecipientsRequest(BaseModel):
    sender: EmailAddress
    text: str = Field(min_length=1)


class MutationResponse(BaseModel):
    success: bool = True
    message: str


class FriendListResponse(BaseModel):
    success: bool = True
    friends: list[str]
    count: int


class BlockStatusResponse(BaseModel):
    success: bool = True
    is_blocked: bool
    is_blocked_by: bool


class RecipientsResponse(BaseModel):
    success: bool = True
    recipients: list[str]
