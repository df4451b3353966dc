"""Error types for contextual cards."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class CardErrorClass(str, Enum):
    """Classification of card errors.

    - CONTRACT: A producer emitted a batch that breaks its ownership contract
    - FETCH: A card source failed while loading
    - SCHEMA: A card source returned data that is not a valid card
    """

    CONTRACT = "CONTRACT"
    FETCH = "FETCH"
    SCHEMA = "SCHEMA"


class CardError(Exception):
    """Base exception for card errors.

    Provides structured error information for logging and status reporting.
    """

    def __init__(
        self,
        error_class: CardErrorClass,
        message: str,
        source_id: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the card error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            source_id: Identifier of the producer or source that failed.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.source_id = source_id
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | int | bool | None | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "source_id": self.source_id,
            "details": self.details,
        }


class ProducerContractError(CardError):
    """A producer pushed an update it is not allowed to push.

    Raised for types the producer does not own, cards filed under the
    wrong type key, or duplicate names inside one batch.
    """

    def __init__(
        self,
        message: str,
        source_id: str | None = None,
        card_type: str | None = None,
        card_name: str | None = None,
    ) -> None:
        """Initialize the contract error.

        Args:
            message: Human-readable error message.
            source_id: Identifier of the offending producer.
            card_type: Card type involved in the violation.
            card_name: Card name involved in the violation.
        """
        details: dict[str, str | int | bool | None] = {}
        if card_type is not None:
            details["card_type"] = card_type
        if card_name is not None:
            details["card_name"] = card_name

        super().__init__(
            error_class=CardErrorClass.CONTRACT,
            message=message,
            source_id=source_id,
            details=details,
        )
        self.card_type = card_type
        self.card_name = card_name


class CardSourceError(CardError):
    """A card source failed during an aggregate load."""


class ErrorRecord(BaseModel):
    """Serializable error record for load results and reporting."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: CardErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    source_id: str | None = Field(default=None, description="Source identifier")
    details: dict[str, str | int | bool | None] = Field(
        default_factory=dict, description="Additional error details"
    )

    @classmethod
    def from_exception(cls, error: CardError) -> "ErrorRecord":
        """Create an ErrorRecord from a CardError exception.

        An empty message is replaced with the exception class and error
        class so the record stays valid.

        Args:
            error: The exception to convert.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            error_class=error.error_class,
            message=error.message
            or f"{type(error).__name__} ({error.error_class.value})",
            source_id=error.source_id,
            details=error.details,
        )
