import os
import re
import tempfile
from pathlib import Path

_test_tmp_dir = tempfile.mkdtemp(prefix="clientes_api_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_test_tmp_dir) / 'test.db'}"
os.environ["CSRF_SECRET"] = "test-csrf-secret-do-not-use-in-production"
os.environ["APP_ENV"] = "test"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.setdefault("SEED_ADMIN_LOGIN", "")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from clientes_api.database import Base, engine, init_db, session_scope  # noqa: E402
from clientes_api.main import app  # noqa: E402
from clientes_api.models.permisos import (  # noqa: E402
    MenuOptionEntry,
    PermissionEntry,
    ProfileEntry,
    UserProfileEntry,
)
from clientes_api.models.user import UserEntry  # noqa: E402
from clientes_api.services.captcha import captcha_store  # noqa: E402
from clientes_api.services.passwords import hash_password  # noqa: E402
from clientes_api.services.rate_limit import login_rate_limiter  # noqa: E402

DEFAULT_PASSWORD = "Secreta123!"

_QUESTION_RE = re.compile(r"(\d+) \+ (\d+)")


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_state():
    Base.metadata.drop_all(bind=engine)
    init_db()
    captcha_store.clear()
    login_rate_limiter.reset()
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def clock():
    return FakeClock()


def create_user(
    login: str = "jperez",
    password: str = DEFAULT_PASSWORD,
    *,
    active: bool = True,
    full_name: str = "Juan Perez",
    email: str = "jperez@example.com",
) -> int:
    with session_scope() as session:
        entry = UserEntry(
            login=login,
            full_name=full_name,
            email=email,
            password_hash=hash_password(password, rounds=4),
            active=active,
        )
        session.add(entry)
        session.flush()
        return entry.id


def grant(
    user_id: int,
    option: str = "CLIENTES",
    *,
    read: bool = False,
    create: bool = False,
    update: bool = False,
    delete: bool = False,
    profile_name: str | None = None,
) -> None:
    with session_scope() as session:
        option_entry = session.query(MenuOptionEntry).filter_by(name=option).one_or_none()
        if option_entry is None:
            option_entry = MenuOptionEntry(name=option)
            session.add(option_entry)
        profile = ProfileEntry(
            name=profile_name or f"PERFIL_{user_id}_{option}_{read}{create}{update}{delete}"
        )
        session.add(profile)
        session.flush()
        session.add(
            PermissionEntry(
                profile_id=profile.id,
                option_id=option_entry.id,
                can_read=read,
                can_create=create,
                can_update=update,
                can_delete=delete,
            )
        )
        session.add(UserProfileEntry(user_id=user_id, profile_id=profile.id))


def grant_all(user_id: int, option: str = "CLIENTES") -> None:
    grant(user_id, option, read=True, create=True, update=True, delete=True)


def solve_captcha(question: str) -> str:
    match = _QUESTION_RE.search(question)
    assert match, question
    return str(int(match.group(1)) + int(match.group(2)))


def login(client, login_name: str = "jperez", password: str = DEFAULT_PASSWORD):
    challenge = client.get("/api/auth/captcha").json()
    return client.post(
        "/api/auth/login",
        json={
            "usuario": login_name,
            "password": password,
            "captchaId": challenge["id"],
            "captchaRespuesta": solve_captcha(challenge["question"]),
        },
    )
