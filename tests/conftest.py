import pytest
import requests
from flask_jwt_extended import create_access_token

from biolink import create_app
from biolink.config import TestingConfig
from biolink.extensions import db
from biolink.models import Folder, Link, User
from biolink.services.redis_service import RedisService


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("network disabled in tests")

    monkeypatch.setattr("biolink.services.metadata_service.requests.get", refuse)
    monkeypatch.setattr("biolink.services.metadata_service.requests.post", refuse)


@pytest.fixture
def app():
    RedisService.reset()
    app = create_app(TestingConfig)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()

    RedisService.reset()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def make(user_id="user-1"):
        token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def make_user(app):
    def make(user_id="user-1", username=None):
        user = User(id=user_id, username=username)
        db.session.add(user)
        db.session.commit()
        return user

    return make


@pytest.fixture
def make_link(app):
    def make(user_id="user-1", title="Link", url="https://example.com", order=0,
             folder_id=None, scheduled_at=None):
        if db.session.get(User, user_id) is None:
            db.session.add(User(id=user_id))
        link = Link(user_id=user_id, title=title, url=url, order=order,
                    folder_id=folder_id, scheduled_at=scheduled_at)
        db.session.add(link)
        db.session.commit()
        return link

    return make


@pytest.fixture
def make_folder(app):
    def make(user_id="user-1", name="Folder", position=0):
        if db.session.get(User, user_id) is None:
            db.session.add(User(id=user_id))
        folder = Folder(user_id=user_id, name=name, position=position)
        db.session.add(folder)
        db.session.commit()
        return folder

    return make
