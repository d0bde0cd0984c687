import os
import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# 必须在导入 app 之前设置，Config 在导入时读取环境变量
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_ENV"] = "development"
os.environ.pop("PODCAST_API_BASE_URL", None)

from app import app as flask_app  # noqa: E402
from models import db  # noqa: E402


@pytest.fixture
def app():
    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    resp = client.post("/api/auth/register", json={"username": "alice", "password": "secret1"})
    assert resp.get_json()["success"] is True
    return client


@pytest.fixture
def channel_id(auth_client):
    resp = auth_client.post(
        "/api/channels",
        json={"name": "history", "nameCn": "历史", "youtubeUrl": "https://youtube.com/@history", "prompt": "讲历史故事"},
    )
    return resp.get_json()["id"]
