"""Service for the bank and MoMo accounts a user keeps on file."""

import logging
from datetime import datetime
from typing import Dict, List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import upsert_insert
from ..models.payment_method import PaymentAccountType, UserPaymentMethod
from ..schemas.payment_method import BankAccountInput, MomoAccountInput, SavePaymentAccountsRequest

logger = logging.getLogger(__name__)


def _bank_columns(bank: BankAccountInput) -> Dict[str, str]:
    return {
        "bank_name": bank.bank_name,
        "account_name": bank.account_name,
        "account_number": bank.account_number,
    }


def _momo_columns(momo: MomoAccountInput) -> Dict[str, str]:
    return {
        "momo_owner": momo.owner_name,
        "momo_phone": momo.phone_number,
    }


class PaymentMethodService:
    """Service for payment-method-on-file operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_methods(self, user_id: int) -> List[UserPaymentMethod]:
        """Get all accounts on file for a user."""
        stmt = (
            select(UserPaymentMethod)
            .where(UserPaymentMethod.user_id == user_id)
            .order_by(UserPaymentMethod.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _upsert(self, user_id: int, account_type: PaymentAccountType, columns: Dict[str, str]) -> None:
        now = datetime.utcnow()
        stmt = upsert_insert(self.db, UserPaymentMethod).values(
            user_id=user_id,
            type=account_type.value,
            created_at=now,
            updated_at=now,
            **columns
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "type"],
            set_={**columns, "updated_at": now}
        )
        await self.db.execute(stmt)

    async def _delete(self, user_id: int, account_type: PaymentAccountType) -> int:
        stmt = delete(UserPaymentMethod).where(
            UserPaymentMethod.user_id == user_id,
            UserPaymentMethod.type == account_type.value
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def save_methods(self, user_id: int, request: SavePaymentAccountsRequest) -> List[UserPaymentMethod]:
        """
        Save the submitted account blocks and return the accounts now on file.

        A block with every field empty deletes that account type.

        Raises:
            SQLAlchemyError: If the store rejects the writes
        """
        blocks = (
            (PaymentAccountType.BANK, request.bank, _bank_columns),
            (PaymentAccountType.MOMO, request.momo, _momo_columns),
        )

        try:
            for account_type, block, to_columns in blocks:
                if block is None:
                    continue
                if block.is_empty:
                    await self._delete(user_id, account_type)
                    action = "deleted"
                else:
                    await self._upsert(user_id, account_type, to_columns(block))
                    action = "saved"
                logger.info(
                    "Payment method %s", action,
                    extra={"user_id": user_id, "type": account_type.value}
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to save payment methods",
                extra={"user_id": user_id, "error": str(e)},
                exc_info=True
            )
            raise

        return await self.list_methods(user_id)

    async def delete_method(self, user_id: int, account_type: PaymentAccountType) -> List[UserPaymentMethod]:
        """
        Delete one account type and return the accounts still on file.

        Raises:
            SQLAlchemyError: If the store rejects the delete
        """
        try:
            deleted = await self._delete(user_id, account_type)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to delete payment method",
                extra={"user_id": user_id, "type": account_type.value, "error": str(e)},
                exc_info=True
            )
            raise

        logger.info(
            "Payment method deleted",
            extra={"user_id": user_id, "type": account_type.value, "deleted": deleted}
        )

        return await self.list_methods(user_id)
