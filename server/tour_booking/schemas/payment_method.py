"""Payment-method-on-file Pydantic schemas."""

from typing import Any, Optional

from pydantic import field_validator

from .common import CamelModel


def _trimmed(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class BankAccount(CamelModel):
    id: int
    bank_name: str = ""
    account_name: str = ""
    account_number: str = ""


class MomoAccount(CamelModel):
    id: int
    owner_name: str = ""
    phone_number: str = ""


class PaymentAccounts(CamelModel):
    """Saved accounts; a type is omitted when nothing is on file."""

    bank: Optional[BankAccount] = None
    momo: Optional[MomoAccount] = None


class BankAccountInput(CamelModel):
    bank_name: str = ""
    account_name: str = ""
    account_number: str = ""

    @field_validator("bank_name", "account_name", "account_number", mode="before")
    @classmethod
    def trim(cls, v: Any) -> str:
        return _trimmed(v)

    @property
    def is_empty(self) -> bool:
        return not (self.bank_name or self.account_name or self.account_number)


class MomoAccountInput(CamelModel):
    owner_name: str = ""
    phone_number: str = ""

    @field_validator("owner_name", "phone_number", mode="before")
    @classmethod
    def trim(cls, v: Any) -> str:
        return _trimmed(v)

    @property
    def is_empty(self) -> bool:
        return not (self.owner_name or self.phone_number)


class SavePaymentAccountsRequest(CamelModel):
    """
    Request schema for saving payment accounts.

    A missing or null block leaves that type untouched; a block whose
    fields are all empty removes it.
    """

    bank: Optional[BankAccountInput] = None
    momo: Optional[MomoAccountInput] = None
