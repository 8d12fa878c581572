"""Data models for parsed pension deposits.

These models carry the parser's output to its consumers:
- ParsedDeposit: one recovered row of the provider's deposit table
- ParseResult: the whole-document outcome with diagnostics
- BulkDepositInput / BulkCreateDepositsRequest: the payload handed to the
  bulk-import consumer, with ISO date strings and no raw text
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    computed_field,
    field_serializer,
    field_validator,
)

from .config import DEFAULT_MAX_DEPOSIT_AMOUNT

MAX_BULK_DEPOSITS = 100

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class BulkDepositInput(BaseModel):
    """A single deposit in the bulk-import payload.

    Dates arrive and leave as ISO-8601 strings; amounts must be real
    numbers, so ``"100"`` and ``True`` are rejected.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "depositDate": "2025-01-02",
                    "salaryMonth": "2024-12-01",
                    "amount": 3155,
                    "employer": "וויאנטיס בע\"מ",
                }
            ]
        },
    )

    deposit_date: date = Field(
        alias="depositDate",
        description="ISO-8601 date the funds were deposited",
    )
    salary_month: date = Field(
        alias="salaryMonth",
        description="ISO-8601 date of the first day of the payroll month",
    )
    amount: float = Field(gt=0, description="Total deposit amount")
    employer: NonEmptyStr = Field(description="Employer name")

    @field_validator("deposit_date", "salary_month", mode="before")
    @classmethod
    def require_iso_string(cls, v: Any) -> Any:
        """Accept ISO strings and dates only, not timestamps."""
        if v is None or isinstance(v, (str, date)):
            return v
        raise ValueError(f"Expected an ISO-8601 date string, got {type(v).__name__}")

    @field_validator("amount", mode="before")
    @classmethod
    def require_number(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, (int, float, Decimal)):
            raise ValueError("Amount must be a number")
        return v

    @field_serializer("deposit_date", "salary_month")
    def serialize_date(self, v: date) -> str:
        return v.isoformat()


class BulkCreateDepositsRequest(BaseModel):
    """Request body for importing many deposits into one pension account."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: NonEmptyStr = Field(alias="accountId", description="Target pension account")
    deposits: list[BulkDepositInput] = Field(
        min_length=1,
        max_length=MAX_BULK_DEPOSITS,
    )


class ParsedDeposit(BaseModel):
    """One deposit row recovered from a pension statement.

    Dates are plain calendar dates, so no timezone conversion can shift
    them when they are serialized.
    """

    model_config = ConfigDict(frozen=True)

    deposit_date: date = Field(description="The date the funds were deposited")
    salary_month: date = Field(
        description="The payroll month, as the first day of that month"
    )
    amount: Decimal = Field(description="Total deposit amount for the month")
    employer: str = Field(description="Employer name, or 'Unknown'")
    raw_text: Optional[str] = Field(
        default=None,
        description="Source line the deposit was extracted from, for debugging",
    )

    @field_validator("salary_month")
    @classmethod
    def validate_first_of_month(cls, v: date) -> date:
        if v.day != 1:
            raise ValueError(f"Salary month must be the first day of a month, got {v}")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal."""
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount_range(cls, v: Decimal) -> Decimal:
        if v <= 0 or v > DEFAULT_MAX_DEPOSIT_AMOUNT:
            raise ValueError(
                f"Deposit amount must be in (0, {DEFAULT_MAX_DEPOSIT_AMOUNT}], got {v}"
            )
        return v

    def to_bulk_input(self) -> BulkDepositInput:
        """Convert to the bulk-import shape (ISO dates, no raw text)."""
        return BulkDepositInput(
            deposit_date=self.deposit_date,
            salary_month=self.salary_month,
            amount=float(self.amount),
            employer=self.employer,
        )


class ParseResult(BaseModel):
    """Outcome of parsing one pension statement.

    Built once at the end of a parse; the collections are tuples so the
    result cannot be changed afterwards. Every failure mode is represented
    here rather than raised.
    """

    model_config = ConfigDict(frozen=True)

    success: bool = False
    deposits: tuple[ParsedDeposit, ...] = ()
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    provider_name: Optional[str] = None
    report_date: Optional[date] = None
    member_name: Optional[str] = None

    @computed_field
    @property
    def deposit_count(self) -> int:
        return len(self.deposits)

    @computed_field
    @property
    def total_amount(self) -> Decimal:
        """Sum of all extracted deposit amounts."""
        return sum((d.amount for d in self.deposits), Decimal("0"))

    def to_response(self) -> dict[str, Any]:
        """Render the result as a JSON-ready payload for the upload endpoint."""
        if not self.success:
            return {
                "success": False,
                "error": "Failed to parse PDF",
                "details": list(self.errors),
            }

        return {
            "success": True,
            "data": {
                "deposits": [
                    d.to_bulk_input().model_dump(by_alias=True) for d in self.deposits
                ],
                "providerName": self.provider_name,
                "reportDate": self.report_date.isoformat() if self.report_date else None,
                "memberName": self.member_name,
                "warnings": list(self.warnings),
            },
        }
