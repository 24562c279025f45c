import os

# Point the app at SQLite before any marketplace module builds its settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.core.config import settings
from marketplace.core.database import get_db
from marketplace.core.rate_limiter import rate_limiter
from marketplace.main import app
from marketplace.models import Base, UserRole, ClassGroup, Course, CourseModule, CourseLesson, Mentorship, Event


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    rate_limiter.reset()


@pytest.fixture
def seed(session_factory):
    """Persist model instances in their own session and hand them back."""
    async def _seed(*objects):
        async with session_factory() as session:
            session.add_all(objects)
            await session.commit()
        return objects[0] if len(objects) == 1 else objects
    return _seed


def make_token(user_id, **claims) -> str:
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


@pytest.fixture
def member_id():
    return uuid.uuid4()


@pytest_asyncio.fixture
async def admin_id(seed):
    user_id = uuid.uuid4()
    await seed(UserRole(user_id=user_id, role="admin"))
    return user_id


@pytest.fixture
def profile_form():
    return {
        "full_name": "Ana Maria Domingos",
        "phone": "923456789",
        "birth_date": "1998-04-12",
        "gender": "female",
        "id_number": "004567890LA041",
        "address": "Rua Rainha Ginga, 45",
        "city": "Luanda",
        "province": "Luanda",
        "employment_status": "student",
        "academic_info": "Licenciatura em Economia",
    }


@pytest.fixture
def profile_fields(profile_form):
    return {**profile_form, "birth_date": date(1998, 4, 12)}


@pytest_asyncio.fixture
async def class_group(seed):
    return await seed(ClassGroup(
        title="Excel para Negócios",
        schedule="Sábados 09:00-12:00",
        format="presencial",
        instructor="Carlos Neto",
        price_aoa=Decimal("100000.00"),
        spots=20,
        topics=["Fórmulas", "Tabelas dinâmicas"],
    ))


@pytest_asyncio.fixture
async def course(seed):
    return await seed(Course(
        title="Gestão Financeira Pessoal",
        category="finance",
        level="beginner",
        price_aoa=Decimal("45000.00"),
    ))


@pytest_asyncio.fixture
async def course_lessons(seed, course):
    """A course outline with one free preview lesson and one paid lesson."""
    module = await seed(CourseModule(course_id=course.id, title="Introdução", order_index=0))
    free_lesson, paid_lesson = await seed(
        CourseLesson(module_id=module.id, title="Boas-vindas", content="Bem-vindo!", order_index=0, is_free=True),
        CourseLesson(module_id=module.id, title="Orçamento", content="Regra 50/30/20", order_index=1, is_free=False),
    )
    return free_lesson, paid_lesson


@pytest_asyncio.fixture
async def mentorship(seed):
    return await seed(Mentorship(
        title="Mentoria de Carreira",
        category="career",
        duration_weeks=8,
        mentor_id=uuid.uuid4(),
        price_aoa=Decimal("75000.00"),
        max_students=5,
    ))


@pytest_asyncio.fixture
async def event(seed):
    return await seed(Event(
        title="Feira de Empreendedorismo",
        description="Encontro anual de empreendedores",
        address="Centro de Conferências de Belas",
        creator="JU10",
        target_date=datetime.now(timezone.utc) + timedelta(days=3),
        created_by=uuid.uuid4(),
    ))
