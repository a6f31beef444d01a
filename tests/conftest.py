from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from brandscope.core.config import settings

# Override settings for tests
settings.fernet_key = "KxJCocbnA3KD20pkgSN3uUZybasKP1X9lAJDX4oLxoQ="  # test-only Fernet key
settings.app_env = "development"

import brandscope.models  # noqa: E402,F401  (registers all tables on Base.metadata)
from brandscope.core.encryption import encrypt_credential, reset_cipher  # noqa: E402
from brandscope.db.base import Base  # noqa: E402
from brandscope.db.postgres import get_db  # noqa: E402
from brandscope.main import app  # noqa: E402
from brandscope.models.ai_provider import AiProvider  # noqa: E402
from brandscope.models.brand import Brand, Competitor  # noqa: E402
from brandscope.models.brand_prompt import BrandPrompt  # noqa: E402

# In-memory SQLite shared by every session of a test via StaticPool
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


ACME_RAW_RESPONSE = """Here is the answer you asked for.

HTML_RESPONSE_START
<h2>Best gadget</h2>
<p>Acme makes a solid choice, while <a href="https://widgetco.com/product">Widgetco</a> is its closest rival.</p>
HTML_RESPONSE_END

ANALYSIS_START
Resources:
- URL: https://widgetco.com/product
- Type: competitor_website
- Title: Widgetco Product
- Description: Widgetco flagship gadget page.

Brand_Sentiment: Positive (8/10)
Brand_Position: 35%
Brand_Visibility: 7
Competitor_Mentions: {"Widgetco":2}
ANALYSIS_END
"""


@pytest.fixture
def acme_raw_response() -> str:
    return ACME_RAW_RESPONSE


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def acme_prompt(db_session) -> BrandPrompt:
    """Brand 'Acme' with competitor 'Widgetco' and the phrase 'best gadget'."""
    brand = Brand(name="Acme", website="https://acme.example")
    brand.competitors = [Competitor(name="Widgetco", domain="widgetco.com")]
    prompt = BrandPrompt(brand=brand, prompt="best gadget")
    db_session.add_all([brand, prompt])
    await db_session.commit()
    return prompt


@pytest.fixture
async def openai_provider(db_session) -> AiProvider:
    provider = AiProvider(
        name="openai",
        display_name="OpenAI",
        is_enabled=True,
        api_key=encrypt_credential("sk-test-key"),
        api_config={"model": "gpt-4o-mini", "temperature": 0.5, "max_tokens": 1500},
    )
    db_session.add(provider)
    await db_session.commit()
    return provider


@pytest.fixture
def set_fernet_key(monkeypatch):
    """Swap ``settings.fernet_key`` for one test; the cached cipher is rebuilt."""

    def _set(key: str) -> None:
        monkeypatch.setattr(settings, "fernet_key", key)
        reset_cipher()

    yield _set
    reset_cipher()
