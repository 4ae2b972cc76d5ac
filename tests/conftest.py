"""
Pytest configuration and fixtures for Hire-Me API tests.
"""
from datetime import timedelta
from decimal import Decimal
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select, update

from app.core.config import Settings
from app.core.security import get_password_hash
from app.core.clock import utcnow
from app.domain.enums import PaymentStatus, TokenKind, UserRole
from app.infrastructure.external_services.email_service import EmailService, EmailDeliveryError
from app.infrastructure.external_services.mpesa_service import StkPushResult, StkQueryResult
from app.infrastructure.orm.user_model import UserModel
from app.infrastructure.orm.product_model import ProductModel
from app.infrastructure.orm.order_model import OrderModel
from app.infrastructure.orm.token_model import UserTokenModel
from app.main import create_app

DEFAULT_PASSWORD = "secret123"


class RecordingEmailService(EmailService):
    """Keeps outgoing mail in memory instead of talking to SMTP."""

    def __init__(self, settings):
        super().__init__(settings)
        self.sent = []
        self.fail = False

    async def send_email(self, to_email, subject, html_content, text_content=None):
        if self.fail:
            raise EmailDeliveryError("SMTP server unavailable")
        self.sent.append({"to": to_email, "subject": subject, "html": html_content, "text": text_content})

    def to(self, email: str) -> list:
        return [message for message in self.sent if message["to"] == email]


class FakeMpesaService:
    """Stands in for Daraja: records STK pushes and answers queries from a preset result."""

    def __init__(self):
        self.push_calls = []
        self.query_calls = []
        self.push_error: Optional[Exception] = None
        self.query_result = StkQueryResult(
            status=PaymentStatus.PENDING,
            result_code="4999",
            result_description="The transaction is still under processing",
        )
        self._counter = 0

    async def request_payment(self, phone, amount, reference, description):
        self.push_calls.append({"phone": phone, "amount": amount, "reference": reference})
        if self.push_error:
            raise self.push_error
        self._counter += 1
        return StkPushResult(
            checkout_request_id=f"ws_CO_19102026{self._counter:06d}",
            merchant_request_id=f"29115-3462093-{self._counter}",
            response_description="Success. Request accepted for processing",
            customer_message="Success. Request accepted for processing",
        )

    async def query_payment(self, checkout_request_id):
        self.query_calls.append(checkout_request_id)
        return self.query_result


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        SECRET_KEY="test-secret-key-for-unit-tests-only",
        TESTING=True,
        LOG_LEVEL="WARNING",
        FRONTEND_URL="http://localhost:3000",
    )


@pytest.fixture
def email_service(settings) -> RecordingEmailService:
    return RecordingEmailService(settings)


@pytest.fixture
def mpesa() -> FakeMpesaService:
    return FakeMpesaService()


@pytest.fixture
async def app(settings, email_service, mpesa):
    application = create_app(settings, mpesa_service=mpesa, email_service=email_service)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_factory(app):
    return app.state.database.session_factory


@pytest.fixture
def create_user(session_factory):
    """Insert a user directly; verified by default."""

    async def _create(
        email: str = "wanjiru@hireme.co.ke",
        password: str = DEFAULT_PASSWORD,
        name: str = "Wanjiru Kamau",
        verified: bool = True,
        role: UserRole = UserRole.USER,
    ) -> int:
        async with session_factory() as session:
            user = UserModel(
                email=email,
                hashed_password=get_password_hash(password),
                name=name,
                role=role,
                email_verified=verified,
                login_attempts=0,
            )
            session.add(user)
            await session.commit()
            return user.id

    return _create


@pytest.fixture
def login(client):
    """Log in through the API and return bearer headers."""

    async def _login(email: str = "wanjiru@hireme.co.ke", password: str = DEFAULT_PASSWORD) -> dict:
        response = await client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        # Tests authenticate explicitly; drop the session cookie the client just stored
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
async def user_headers(create_user, login) -> dict:
    await create_user()
    return await login()


@pytest.fixture
async def admin_headers(create_user, login) -> dict:
    await create_user(email="admin@hireme.co.ke", name="Admin", role=UserRole.ADMIN)
    return await login("admin@hireme.co.ke")


@pytest.fixture
def create_product(session_factory):

    async def _create(
        name: str = "Concrete Mixer",
        price: str = "5000.00",
        category: str = "Construction",
        location: str = "Nairobi",
        available: bool = True,
        description: str = "Diesel drum mixer, 350L",
    ) -> int:
        async with session_factory() as session:
            product = ProductModel(
                name=name,
                price=Decimal(price),
                category=category,
                location=location,
                available=available,
                description=description,
            )
            session.add(product)
            await session.commit()
            return product.id

    return _create


@pytest.fixture
def fetch_order(session_factory):
    """Read an order row straight from the database."""

    async def _fetch(order_id: int) -> OrderModel:
        async with session_factory() as session:
            result = await session.execute(select(OrderModel).where(OrderModel.id == order_id))
            return result.scalar_one()

    return _fetch


@pytest.fixture
def place_order(client):
    """Fill the cart and check out; returns the create-order response body."""

    async def _place(headers: dict, lines, payment_method: str = "mpesa", idempotency_key: str = None) -> dict:
        for product_id, quantity in lines:
            response = await client.post(
                "/api/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers
            )
            assert response.status_code == 200, response.text

        request_headers = dict(headers)
        if idempotency_key:
            request_headers["Idempotency-Key"] = idempotency_key
        response = await client.post(
            "/api/orders",
            json={
                "paymentMethod": payment_method,
                "shippingAddress": "Plot 12, Mombasa Road, Nairobi",
                "contactPhone": "0712345678",
                "contactEmail": "wanjiru@hireme.co.ke",
            },
            headers=request_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _place


@pytest.fixture
def issued_tokens(session_factory):
    """Single-use tokens issued to a user, oldest first."""

    async def _tokens(email: str, kind: TokenKind) -> list:
        async with session_factory() as session:
            result = await session.execute(
                select(UserTokenModel.token)
                .join(UserModel, UserModel.id == UserTokenModel.user_id)
                .where(UserModel.email == email, UserTokenModel.kind == kind)
                .order_by(UserTokenModel.id)
            )
            return list(result.scalars().all())

    return _tokens


@pytest.fixture
def fetch_user(session_factory):

    async def _fetch(email: str) -> UserModel:
        async with session_factory() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            return result.scalar_one()

    return _fetch


@pytest.fixture
def expire_lock(session_factory):
    """Move a user's lockout into the past without touching the failure counter."""

    async def _expire(email: str) -> None:
        async with session_factory() as session:
            await session.execute(
                update(UserModel)
                .where(UserModel.email == email)
                .values(locked_until=utcnow() - timedelta(seconds=1))
            )
            await session.commit()

    return _expire


@pytest.fixture
def expire_tokens(session_factory):
    """Backdate every token of one kind issued to a user."""

    async def _expire(email: str, kind: TokenKind) -> None:
        async with session_factory() as session:
            user_id = (await session.execute(select(UserModel.id).where(UserModel.email == email))).scalar_one()
            await session.execute(
                update(UserTokenModel)
                .where(UserTokenModel.user_id == user_id, UserTokenModel.kind == kind)
                .values(expires_at=utcnow() - timedelta(minutes=1))
            )
            await session.commit()

    return _expire
