"""Unit tests for payment methods on file."""

import pytest

from tour_booking.models import PaymentAccountType
from tour_booking.schemas.payment_method import SavePaymentAccountsRequest
from tour_booking.services.payment_method_service import PaymentMethodService


def _by_type(rows):
    return {row.type: row for row in rows}


@pytest.mark.asyncio
async def test_save_bank_and_momo(test_session, user_id):
    service = PaymentMethodService(test_session)

    rows = await service.save_methods(user_id, SavePaymentAccountsRequest.model_validate({
        "bank": {"bankName": " Vietcombank ", "accountName": "NGUYEN VAN A", "accountNumber": "0123456789"},
        "momo": {"ownerName": "Nguyen Van A", "phoneNumber": "0900000000"},
    }))

    accounts = _by_type(rows)
    assert set(accounts) == {"bank", "momo"}
    assert accounts["bank"].bank_name == "Vietcombank"
    assert accounts["bank"].account_number == "0123456789"
    assert accounts["momo"].momo_phone == "0900000000"


@pytest.mark.asyncio
async def test_save_updates_existing_row(test_session, user_id):
    """Saving a type twice updates the same row."""
    service = PaymentMethodService(test_session)
    first = await service.save_methods(user_id, SavePaymentAccountsRequest.model_validate({
        "bank": {"bankName": "ACB", "accountName": "A", "accountNumber": "1"},
    }))
    original_id = first[0].id

    rows = await service.save_methods(user_id, SavePaymentAccountsRequest.model_validate({
        "bank": {"bankName": "Techcombank", "accountName": "A", "accountNumber": "2"},
    }))

    assert len(rows) == 1
    assert rows[0].id == original_id
    assert rows[0].bank_name == "Techcombank"
    assert rows[0].account_number == "2"


@pytest.mark.asyncio
async def test_empty_block_deletes_and_missing_block_keeps(test_session, user_id):
    service = PaymentMethodService(test_session)
    await service.save_methods(user_id, SavePaymentAccountsRequest.model_validate({
        "bank": {"bankName": "ACB", "accountName": "A", "accountNumber": "1"},
        "momo": {"ownerName": "A", "phoneNumber": "0900"},
    }))

    rows = await service.save_methods(user_id, SavePaymentAccountsRequest.model_validate({
        "bank": {"bankName": "  ", "accountName": "", "accountNumber": None},
    }))

    assert list(_by_type(rows)) == ["momo"]


@pytest.mark.asyncio
async def test_delete_method(test_session, user_id):
    service = PaymentMethodService(test_session)
    await service.save_methods(user_id, SavePaymentAccountsRequest.model_validate({
        "bank": {"bankName": "ACB", "accountName": "A", "accountNumber": "1"},
        "momo": {"ownerName": "A", "phoneNumber": "0900"},
    }))

    rows = await service.delete_method(user_id, PaymentAccountType.MOMO)
    assert list(_by_type(rows)) == ["bank"]

    # Deleting a type that is not on file is harmless
    rows = await service.delete_method(user_id, PaymentAccountType.MOMO)
    assert list(_by_type(rows)) == ["bank"]


@pytest.mark.asyncio
async def test_accounts_are_per_user(test_session, user_factory):
    service = PaymentMethodService(test_session)
    owner = await user_factory()
    other = await user_factory()
    await service.save_methods(owner, SavePaymentAccountsRequest.model_validate({
        "momo": {"ownerName": "A", "phoneNumber": "0900"},
    }))

    assert await service.list_methods(other) == []
