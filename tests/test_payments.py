"""
Tests for M-Pesa STK push initiation, callbacks and status polling.
"""
import asyncio
from datetime import datetime

import pytest

from app.domain.enums import PaymentStatus
from app.domain.exceptions import PaymentInitiationError
from app.infrastructure.external_services.mpesa_service import StkQueryResult

CUSTOMER = "wanjiru@hireme.co.ke"

RESULT_DESCRIPTIONS = {
    0: "The service request is processed successfully.",
    1032: "Request cancelled by user",
    2001: "The initiator information is invalid.",
}


def callback_body(checkout_request_id: str, result_code: int = 0, amount=5000, receipt: str = "SJK4H7L2QX") -> dict:
    callback = {
        "MerchantRequestID": "29115-3462093-1",
        "CheckoutRequestID": checkout_request_id,
        "ResultCode": result_code,
        "ResultDesc": RESULT_DESCRIPTIONS.get(result_code, "Failed"),
    }
    if result_code == 0:
        callback["CallbackMetadata"] = {"Item": [
            {"Name": "Amount", "Value": amount},
            {"Name": "MpesaReceiptNumber", "Value": receipt},
            {"Name": "Balance"},
            {"Name": "TransactionDate", "Value": 20261019123000},
            {"Name": "PhoneNumber", "Value": 254712345678},
        ]}
    return {"Body": {"stkCallback": callback}}


def subjects(email_service) -> list:
    return [message["subject"] for message in email_service.to(CUSTOMER)]


@pytest.fixture
async def order(create_product, user_headers, place_order) -> dict:
    product_id = await create_product("Concrete Mixer", "5000")
    return await place_order(user_headers, [(product_id, 1)])


@pytest.fixture
def stk_push(client, user_headers, order):
    """Start a payment for the order and return the CheckoutRequestID."""

    async def _push(amount=5000, phone="0712345678") -> str:
        response = await client.post(
            "/api/mpesa/stkpush",
            json={"orderId": order["orderId"], "phoneNumber": phone, "amount": amount},
            headers=user_headers,
        )
        assert response.status_code == 200, response.text
        return response.json()["checkoutRequestId"]

    return _push


@pytest.mark.asyncio
async def test_stk_push_sends_whole_amount_and_normalized_phone(order, stk_push, mpesa, fetch_order):
    checkout_id = await stk_push(phone="+254 712 345 678")

    assert mpesa.push_calls == [{"phone": "254712345678", "amount": 5000, "reference": order["orderNumber"]}]
    stored = await fetch_order(order["orderId"])
    assert stored.payment_reference == checkout_id
    assert stored.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_stk_push_amount_within_tolerance(order, stk_push):
    assert await stk_push(amount=5000.005)


@pytest.mark.asyncio
async def test_stk_push_amount_mismatch(client, user_headers, order, mpesa):
    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phoneNumber": "0712345678", "amount": 5001},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "amount_mismatch"
    assert mpesa.push_calls == []


@pytest.mark.asyncio
async def test_stk_push_invalid_phone(client, user_headers, order, mpesa):
    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phoneNumber": "12345", "amount": 5000},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_phone"
    assert mpesa.push_calls == []


@pytest.mark.asyncio
async def test_stk_push_requires_phone_number_field(client, user_headers, order, mpesa):
    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phone": "0712345678", "amount": 5000},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert mpesa.push_calls == []


@pytest.mark.asyncio
async def test_stk_push_provider_failure_leaves_order_untouched(client, user_headers, order, mpesa, fetch_order):
    mpesa.push_error = PaymentInitiationError("M-Pesa is unreachable", caller_correctable=False)

    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phoneNumber": "0712345678", "amount": 5000},
        headers=user_headers,
    )

    assert response.status_code == 502
    stored = await fetch_order(order["orderId"])
    assert stored.payment_reference is None
    assert stored.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_stk_push_for_someone_elses_order(client, order, create_user, login):
    await create_user(email="kamau@hireme.co.ke")
    other = await login("kamau@hireme.co.ke")

    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phoneNumber": "0712345678", "amount": 5000},
        headers=other,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stk_push_rejected_for_cash_on_delivery(client, user_headers, create_product, place_order):
    product_id = await create_product("Generator", "3000")
    created = await place_order(user_headers, [(product_id, 1)], payment_method="cash_on_delivery")

    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": created["orderId"], "phoneNumber": "0712345678", "amount": 3000},
        headers=user_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_stk_push_rejected_for_cancelled_order(client, user_headers, order):
    await client.post(f"/api/orders/{order['orderId']}/cancel", headers=user_headers)

    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phoneNumber": "0712345678", "amount": 5000},
        headers=user_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_successful_callback_completes_order(client, order, stk_push, fetch_order, email_service):
    checkout_id = await stk_push()

    response = await client.post("/api/mpesa/callback", json=callback_body(checkout_id))

    assert response.status_code == 200
    assert response.json() == {"ResultCode": 0, "ResultDesc": "Accepted"}
    stored = await fetch_order(order["orderId"])
    assert stored.payment_status == PaymentStatus.COMPLETED
    assert stored.mpesa_receipt_number == "SJK4H7L2QX"
    assert stored.payer_phone == "254712345678"
    assert stored.paid_at == datetime(2026, 10, 19, 9, 30, 0)
    assert f"Payment received for {order['orderNumber']}" in subjects(email_service)


@pytest.mark.asyncio
async def test_payment_on_cancelled_order_is_flagged_for_refund(
    client, user_headers, order, stk_push, fetch_order, caplog
):
    checkout_id = await stk_push()
    cancelled = await client.post(f"/api/orders/{order['orderId']}/cancel", headers=user_headers)
    assert cancelled.status_code == 200

    with caplog.at_level("WARNING", logger="app.application.use_cases.process_payment_callback"):
        await client.post("/api/mpesa/callback", json=callback_body(checkout_id))

    stored = await fetch_order(order["orderId"])
    assert stored.status.value == "cancelled"
    assert stored.payment_status == PaymentStatus.COMPLETED
    assert "refund required" in caplog.text
    assert order["orderNumber"] in caplog.text


@pytest.mark.asyncio
async def test_duplicate_callback_is_applied_once(client, order, stk_push, email_service):
    checkout_id = await stk_push()

    for _ in range(3):
        response = await client.post("/api/mpesa/callback", json=callback_body(checkout_id))
        assert response.status_code == 200

    assert subjects(email_service).count(f"Payment received for {order['orderNumber']}") == 1


@pytest.mark.asyncio
async def test_completed_payment_is_never_downgraded(client, order, stk_push, fetch_order):
    checkout_id = await stk_push()
    await client.post("/api/mpesa/callback", json=callback_body(checkout_id))

    await client.post("/api/mpesa/callback", json=callback_body(checkout_id, result_code=2001))

    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_failed_callback_notifies_customer(client, order, stk_push, fetch_order, email_service):
    checkout_id = await stk_push()

    await client.post("/api/mpesa/callback", json=callback_body(checkout_id, result_code=2001))

    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.FAILED
    assert f"Payment for {order['orderNumber']} not completed" in subjects(email_service)


@pytest.mark.asyncio
async def test_user_cancelled_callback(client, order, stk_push, fetch_order, email_service):
    checkout_id = await stk_push()

    await client.post("/api/mpesa/callback", json=callback_body(checkout_id, result_code=1032))

    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.CANCELLED
    assert subjects(email_service) == [f"Order {order['orderNumber']} received"]


@pytest.mark.asyncio
async def test_callback_for_superseded_request_is_ignored(client, order, stk_push, fetch_order):
    first = await stk_push()
    second = await stk_push()
    assert first != second

    await client.post("/api/mpesa/callback", json=callback_body(first))
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.PENDING

    await client.post("/api/mpesa/callback", json=callback_body(second))
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_callback_for_unknown_request(client):
    response = await client.post("/api/mpesa/callback", json=callback_body("ws_CO_unknown"))

    assert response.status_code == 200
    assert response.json()["ResultCode"] == 0


@pytest.mark.asyncio
async def test_malformed_callbacks_are_acknowledged(client):
    not_json = await client.post(
        "/api/mpesa/callback", content=b"<xml/>", headers={"Content-Type": "application/xml"}
    )
    missing_fields = await client.post("/api/mpesa/callback", json={"Body": {}})

    assert not_json.status_code == 200
    assert missing_fields.status_code == 200


@pytest.mark.asyncio
async def test_callback_token_is_enforced(client, app, order, stk_push, fetch_order):
    app.state.settings.MPESA_CALLBACK_TOKEN = "s3cret-callback"
    checkout_id = await stk_push()

    forged = await client.post("/api/mpesa/callback", params={"token": "guess"}, json=callback_body(checkout_id))
    assert forged.status_code == 200
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.PENDING

    genuine = await client.post(
        "/api/mpesa/callback", params={"token": "s3cret-callback"}, json=callback_body(checkout_id)
    )
    assert genuine.status_code == 200
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_reinitiation_after_completion_is_rejected(client, user_headers, order, stk_push, mpesa):
    checkout_id = await stk_push()
    await client.post("/api/mpesa/callback", json=callback_body(checkout_id))

    response = await client.post(
        "/api/mpesa/stkpush",
        json={"orderId": order["orderId"], "phoneNumber": "0712345678", "amount": 5000},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "payment_not_pending"
    assert len(mpesa.push_calls) == 1


@pytest.mark.asyncio
async def test_query_while_pending(client, user_headers, order, stk_push, fetch_order):
    checkout_id = await stk_push()

    response = await client.post(
        "/api/mpesa/query", json={"checkoutRequestId": checkout_id}, headers=user_headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert response.json()["paymentStatus"] == "pending"
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_query_completes_payment(client, user_headers, order, stk_push, mpesa, fetch_order, email_service):
    checkout_id = await stk_push()
    mpesa.query_result = StkQueryResult(PaymentStatus.COMPLETED, "0", "The service request is processed successfully.")

    response = await client.post(
        "/api/mpesa/query", json={"checkoutRequestId": checkout_id}, headers=user_headers
    )

    assert response.json()["status"] == "completed"
    assert response.json()["paymentStatus"] == "completed"
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.COMPLETED
    assert f"Payment received for {order['orderNumber']}" in subjects(email_service)


@pytest.mark.asyncio
async def test_query_does_not_persist_failures(client, user_headers, order, stk_push, mpesa, fetch_order):
    checkout_id = await stk_push()
    mpesa.query_result = StkQueryResult(PaymentStatus.FAILED, "1", "The balance is insufficient for the transaction.")

    response = await client.post(
        "/api/mpesa/query", json={"checkoutRequestId": checkout_id}, headers=user_headers
    )

    assert response.json()["status"] == "failed"
    assert response.json()["paymentStatus"] == "pending"
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_query_after_callback_uses_stored_status(client, user_headers, order, stk_push, mpesa):
    checkout_id = await stk_push()
    await client.post("/api/mpesa/callback", json=callback_body(checkout_id))

    response = await client.post(
        "/api/mpesa/query", json={"checkoutRequestId": checkout_id}, headers=user_headers
    )

    assert response.json()["status"] == "completed"
    assert mpesa.query_calls == []


@pytest.mark.asyncio
async def test_query_unknown_or_foreign_request(client, user_headers, order, stk_push, create_user, login):
    checkout_id = await stk_push()
    await create_user(email="kamau@hireme.co.ke")
    other = await login("kamau@hireme.co.ke")

    unknown = await client.post("/api/mpesa/query", json={"checkoutRequestId": "ws_CO_nope"}, headers=user_headers)
    foreign = await client.post("/api/mpesa/query", json={"checkoutRequestId": checkout_id}, headers=other)

    assert unknown.status_code == 404
    assert foreign.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_query_and_callback_converge(
    client, user_headers, order, stk_push, mpesa, fetch_order, email_service
):
    checkout_id = await stk_push()
    mpesa.query_result = StkQueryResult(PaymentStatus.COMPLETED, "0", "The service request is processed successfully.")

    callback, query = await asyncio.gather(
        client.post("/api/mpesa/callback", json=callback_body(checkout_id)),
        client.post("/api/mpesa/query", json={"checkoutRequestId": checkout_id}, headers=user_headers),
    )

    assert callback.status_code == 200
    assert query.status_code == 200
    assert query.json()["paymentStatus"] == "completed"
    assert (await fetch_order(order["orderId"])).payment_status == PaymentStatus.COMPLETED
    assert subjects(email_service).count(f"Payment received for {order['orderNumber']}") == 1
