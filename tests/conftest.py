"""
BlastDesk - Test Configuration and Fixtures
"""
import io
import os
import tempfile
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker
from PIL import Image

# Set testing environment before the application reads its settings
_TEST_DIR = tempfile.mkdtemp(prefix="blastdesk-tests-")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"

os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = TEST_DATABASE_URL
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BLAST_SCHEDULER_ENABLED'] = 'false'
os.environ['BLAST_SEND_DELAY_SECONDS'] = '0'
os.environ['SMTP_USER'] = 'verify@example.com'
os.environ['SMTP_PASSWORD'] = 'verify-password'
os.environ['BLAST_SMTP_USER'] = 'blast@example.com'
os.environ['BLAST_SMTP_PASSWORD'] = 'blast-password'
os.environ['UPLOAD_DIR'] = os.path.join(_TEST_DIR, 'uploads')
os.environ['LOG_LEVEL'] = 'WARNING'

from blastdesk.main import app
from blastdesk.core.database import Base, get_db
from blastdesk.core.security import get_password_hash, create_access_token
from blastdesk.models import Department, EmailTemplate, Participant, User, UserRole
from blastdesk.services.backdrop_storage import BackdropStorage, get_backdrop_storage

fake = Faker()

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def build_png(width: int = 320, height: int = 200, color: str = "white") -> bytes:
    """Small PNG used as an e-card backdrop"""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def token_for(user: User) -> dict:
    token = create_access_token({
        'sub': str(user.id),
        'username': user.username,
        'role': user.role.value
    })
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def storage(tmp_path) -> BackdropStorage:
    """Backdrop storage rooted in a per-test directory"""
    backdrops = BackdropStorage(base_dir=str(tmp_path / "uploads"))
    backdrops.ensure_base_dir()
    return backdrops


@pytest.fixture
async def client(db_session: AsyncSession, storage: BackdropStorage) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and storage overrides"""
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_backdrop_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def test_user_data() -> dict:
    password = fake.password(length=12)
    return {
        'username': fake.user_name() + str(fake.random_int(100, 999)),
        'password': password,
        'confirmPassword': password,
        'email': fake.email(),
        'firstName': fake.first_name(),
        'lastName': fake.last_name(),
    }


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user"""
    user = User(
        username=fake.user_name() + "_user",
        email=fake.email(),
        hashed_password=get_password_hash('testpassword123'),
        first_name=fake.first_name(),
        last_name=fake.last_name(),
        role=UserRole.USER
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    """Create a SuperAdmin test user"""
    user = User(
        username=fake.user_name() + "_admin",
        email=fake.email(),
        hashed_password=get_password_hash('adminpassword123'),
        first_name=fake.first_name(),
        last_name=fake.last_name(),
        role=UserRole.SUPER_ADMIN
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return token_for(test_user)


@pytest.fixture
def admin_auth_headers(super_admin: User) -> dict:
    """Generate authentication headers for the SuperAdmin"""
    return token_for(super_admin)


@pytest.fixture
async def department(db_session: AsyncSession) -> Department:
    dept = Department(id="dept-eng", name="Engineering")
    db_session.add(dept)
    await db_session.commit()
    return dept


@pytest.fixture
async def participants(db_session: AsyncSession, department: Department) -> list:
    people = [
        Participant(id="p1", name="Ada Lovelace", email="ada@example.com",
                    role="Engineer", department_id=department.id),
        Participant(id="p2", name="Alan Turing", email="alan@example.com",
                    role="Researcher", department_id=department.id, pa_email="pa@example.com"),
        Participant(id="p3", name="No Mail", email=None,
                    role="Intern", department_id=department.id),
    ]
    db_session.add_all(people)
    await db_session.commit()
    return people


@pytest.fixture
async def template(db_session: AsyncSession) -> EmailTemplate:
    tpl = EmailTemplate(
        id="tpl-welcome",
        name="Welcome Email",
        subject="Welcome aboard",
        body="<p>Hello {name} ({role}), reach us at {email}. <a href=\"{unsubscribe_link}\">Unsubscribe</a></p>",
        category="Onboarding",
    )
    db_session.add(tpl)
    await db_session.commit()
    return tpl


@pytest.fixture
async def ecard_template(db_session: AsyncSession, storage: BackdropStorage) -> EmailTemplate:
    file_path = await storage.save("/", "backdrop.png", build_png())
    tpl = EmailTemplate(
        id="tpl-ecard",
        name="Certificate",
        subject="Your certificate",
        body="<p>Congratulations {name}</p>",
        ecard_backdrop_path=file_path,
        name_x=20, name_y=40, name_font_size=24, name_color="#112233",
        role_x=20, role_y=90, role_font_size=16, role_color="#445566",
    )
    db_session.add(tpl)
    await db_session.commit()
    return tpl


@pytest.fixture
def make_png():
    """Factory for backdrop PNG bytes"""
    return build_png


@pytest.fixture
def session_factory(db_session):
    """Session factory on the test database, for code that opens its own sessions"""
    return TestSessionLocal
