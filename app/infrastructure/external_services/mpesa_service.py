"""M-Pesa Daraja service for STK push payments"""

import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from ...core.clock import utcnow
from ...domain.enums import PaymentStatus
from ...domain.exceptions import PaymentInitiationError, ProviderError

logger = logging.getLogger(__name__)

RESULT_SUCCESS = "0"
RESULT_CANCELLED_BY_USER = "1032"
RESULT_STILL_PROCESSING = "4999"
ERROR_STILL_PROCESSING = "500.001.1001"
EAT_OFFSET = timedelta(hours=3)


def map_result_code(result_code: Any) -> PaymentStatus:
    """Translate a Daraja ResultCode into a payment status"""
    code = str(result_code).strip() if result_code is not None else ""
    if code == RESULT_SUCCESS:
        return PaymentStatus.COMPLETED
    if code == RESULT_CANCELLED_BY_USER:
        return PaymentStatus.CANCELLED
    if code in (RESULT_STILL_PROCESSING, ERROR_STILL_PROCESSING):
        return PaymentStatus.PENDING
    return PaymentStatus.FAILED


@dataclass(frozen=True)
class StkPushResult:
    checkout_request_id: str
    merchant_request_id: Optional[str]
    response_description: Optional[str]
    customer_message: Optional[str]


@dataclass(frozen=True)
class StkQueryResult:
    status: PaymentStatus
    result_code: Optional[str]
    result_description: Optional[str]


@dataclass(frozen=True)
class StkCallback:
    checkout_request_id: str
    merchant_request_id: Optional[str]
    result_code: str
    result_description: Optional[str]
    amount: Optional[Decimal] = None
    receipt_number: Optional[str] = None
    phone_number: Optional[str] = None
    transaction_date: Optional[datetime] = None

    @property
    def status(self) -> PaymentStatus:
        # A callback is the final word; "still processing" never arrives here
        status = map_result_code(self.result_code)
        return PaymentStatus.FAILED if status == PaymentStatus.PENDING else status


def parse_stk_callback(body: Dict[str, Any]) -> StkCallback:
    """Parse the Body.stkCallback envelope; raises ValueError when malformed"""
    try:
        callback = body["Body"]["stkCallback"]
        checkout_request_id = callback["CheckoutRequestID"]
        result_code = callback["ResultCode"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed STK callback: missing {e}") from e

    if not checkout_request_id:
        raise ValueError("Malformed STK callback: empty CheckoutRequestID")

    metadata = {}
    for item in (callback.get("CallbackMetadata") or {}).get("Item", []) or []:
        if isinstance(item, dict) and "Name" in item:
            metadata[item["Name"]] = item.get("Value")

    return StkCallback(
        checkout_request_id=str(checkout_request_id),
        merchant_request_id=callback.get("MerchantRequestID"),
        result_code=str(result_code),
        result_description=callback.get("ResultDesc"),
        amount=_to_decimal(metadata.get("Amount")),
        receipt_number=metadata.get("MpesaReceiptNumber"),
        phone_number=str(metadata["PhoneNumber"]) if metadata.get("PhoneNumber") is not None else None,
        transaction_date=_parse_transaction_date(metadata.get("TransactionDate")),
    )


def _timestamp() -> str:
    # Daraja expects East Africa Time (UTC+3)
    return (utcnow() + EAT_OFFSET).strftime("%Y%m%d%H%M%S")


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _parse_transaction_date(value: Any) -> Optional[datetime]:
    # Daraja sends YYYYmmddHHMMSS as a number, in East Africa Time
    if value is None:
        return None
    try:
        return datetime.strptime(str(value), "%Y%m%d%H%M%S") - EAT_OFFSET
    except ValueError:
        return None


class MpesaService:
    """Safaricom Daraja client: OAuth token, STK push and STK query"""

    def __init__(self, settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.mpesa_base_url
        self.consumer_key = settings.MPESA_CONSUMER_KEY
        self.consumer_secret = settings.MPESA_CONSUMER_SECRET
        self.shortcode = settings.MPESA_SHORTCODE
        self.passkey = settings.MPESA_PASSKEY
        self.callback_url = settings.MPESA_CALLBACK_URL
        self.callback_token = settings.MPESA_CALLBACK_TOKEN
        self.timeout = settings.MPESA_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    def _password(self, timestamp: str) -> str:
        raw = f"{self.shortcode}{self.passkey}{timestamp}"
        return base64.b64encode(raw.encode()).decode()

    def _callback_url(self) -> str:
        if not self.callback_token:
            return self.callback_url
        separator = "&" if "?" in self.callback_url else "?"
        return f"{self.callback_url}{separator}token={self.callback_token}"

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        """Client-credentials exchange; tokens are not cached between calls"""
        response = await client.get(
            "/oauth/v1/generate",
            params={"grant_type": "client_credentials"},
            auth=(self.consumer_key, self.consumer_secret),
        )
        if response.status_code != 200:
            logger.error("M-Pesa token exchange failed: %s %s", response.status_code, response.text)
            raise PaymentInitiationError("Failed to authenticate with M-Pesa", caller_correctable=False)

        token = response.json().get("access_token")
        if not token:
            raise PaymentInitiationError("M-Pesa returned no access token", caller_correctable=False)
        return token

    async def request_payment(self, phone: str, amount: int, reference: str, description: str) -> StkPushResult:
        """Send an STK push prompt to ``phone`` for ``amount`` whole shillings"""
        timestamp = _timestamp()
        payload = {
            "BusinessShortCode": self.shortcode,
            "Password": self._password(timestamp),
            "Timestamp": timestamp,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": int(amount),
            "PartyA": phone,
            "PartyB": self.shortcode,
            "PhoneNumber": phone,
            "CallBackURL": self._callback_url(),
            "AccountReference": reference[:12],
            "TransactionDesc": description[:13],
        }

        try:
            async with self._client() as client:
                token = await self._get_access_token(client)
                response = await client.post(
                    "/mpesa/stkpush/v1/processrequest",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.TimeoutException as e:
            logger.error("M-Pesa STK push timed out for %s: %s", reference, e)
            raise PaymentInitiationError("M-Pesa did not respond in time", caller_correctable=False) from e
        except httpx.HTTPError as e:
            logger.error("M-Pesa STK push transport error for %s: %s", reference, e)
            raise PaymentInitiationError("M-Pesa is unreachable", caller_correctable=False) from e

        data = self._json(response)
        if response.status_code != 200:
            message = data.get("errorMessage") or data.get("ResponseDescription") or "STK push request failed"
            logger.warning("M-Pesa rejected STK push for %s: %s %s", reference, response.status_code, data)
            raise PaymentInitiationError(message, caller_correctable=response.status_code < 500)

        if str(data.get("ResponseCode")) != "0" or not data.get("CheckoutRequestID"):
            message = data.get("ResponseDescription") or data.get("errorMessage") or "STK push request failed"
            logger.warning("M-Pesa declined STK push for %s: %s", reference, data)
            raise PaymentInitiationError(message)

        logger.info("STK push accepted for %s: %s", reference, data["CheckoutRequestID"])
        return StkPushResult(
            checkout_request_id=data["CheckoutRequestID"],
            merchant_request_id=data.get("MerchantRequestID"),
            response_description=data.get("ResponseDescription"),
            customer_message=data.get("CustomerMessage"),
        )

    async def query_payment(self, checkout_request_id: str) -> StkQueryResult:
        """Ask Daraja for the outcome of an STK push"""
        timestamp = _timestamp()
        payload = {
            "BusinessShortCode": self.shortcode,
            "Password": self._password(timestamp),
            "Timestamp": timestamp,
            "CheckoutRequestID": checkout_request_id,
        }

        try:
            async with self._client() as client:
                token = await self._get_access_token(client)
                response = await client.post(
                    "/mpesa/stkpushquery/v1/query",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.error("M-Pesa STK query failed for %s: %s", checkout_request_id, e)
            raise ProviderError("Failed to query payment status") from e
        except PaymentInitiationError as e:
            raise ProviderError(e.message) from e

        data = self._json(response)
        if data.get("errorCode") == ERROR_STILL_PROCESSING:
            return StkQueryResult(
                status=PaymentStatus.PENDING,
                result_code=ERROR_STILL_PROCESSING,
                result_description=data.get("errorMessage"),
            )

        if response.status_code != 200 or "ResultCode" not in data:
            logger.warning("M-Pesa STK query error for %s: %s %s", checkout_request_id, response.status_code, data)
            raise ProviderError(data.get("errorMessage") or "Failed to query payment status")

        result_code = str(data["ResultCode"])
        return StkQueryResult(
            status=map_result_code(result_code),
            result_code=result_code,
            result_description=data.get("ResultDesc"),
        )

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
