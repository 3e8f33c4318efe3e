"""Shared fixtures: a fresh app over a temporary SQLite file per test."""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from bloglist_api.app import create_app
from bloglist_api.database import db


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Create test Flask app with a throwaway database file."""
    monkeypatch.setenv('FLASK_ENV', 'test')

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'bloglist.db'}",
        'BCRYPT_ROUNDS': 4,
    })

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


class ApiHelper:
    """Thin wrapper around the test client for the common call sequences."""

    def __init__(self, client):
        self.client = client

    def register(self, user, name, password):
        return self.client.post('/api/users', json={'user': user, 'name': name, 'password': password})

    def login(self, username, password):
        return self.client.post('/api/login', json={'username': username, 'password': password})

    def token_for(self, username, password):
        response = self.login(username, password)
        assert response.status_code == 200, response.get_json()
        return response.get_json()['token']

    @staticmethod
    def auth(token):
        return {'Authorization': f'Bearer {token}'}

    def create_blog(self, token, title, author, url):
        return self.client.post(
            '/api/blogs',
            json={'title': title, 'author': author, 'url': url},
            headers=self.auth(token),
        )

    def like(self, token, blog_id):
        return self.client.patch(f'/api/blogs/{blog_id}/like', headers=self.auth(token))

    def delete(self, token, blog_id):
        return self.client.delete(f'/api/blogs/{blog_id}', headers=self.auth(token))

    def blogs(self):
        return self.client.get('/api/blogs').get_json()


@pytest.fixture
def api(client):
    return ApiHelper(client)
