import itertools

import pytest

from blogapi.app import create_app
from blogapi.extensions import db


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user and return (user, auth headers)."""
    counter = itertools.count(1)

    def _register(role='author', **overrides):
        n = next(counter)
        payload = {
            'firstName': f'First{n}',
            'lastName': f'Last{n}',
            'dob': '1990-05-17',
            'email': f'user{n}@example.com',
            'phoneNo': '9800000000',
            'password': 'secret123',
            'role': role
        }
        payload.update(overrides)
        response = client.post('/auth/register', json=payload)
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body['user'], {'Authorization': f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def author(register):
    return register('author')


@pytest.fixture
def reader(register):
    return register('reader')


@pytest.fixture
def make_category(client):
    counter = itertools.count(1)

    def _make_category(headers, name=None, status='ACTIVE'):
        response = client.post('/categories', headers=headers,
                               json={'name': name or f'Category {next(counter)}', 'status': status})
        assert response.status_code == 201, response.get_json()
        return response.get_json()['category']

    return _make_category


@pytest.fixture
def make_blog(client):
    counter = itertools.count(1)

    def _make_blog(headers, category_id, title=None, body='A body that is long enough.',
                   status='ACTIVE'):
        response = client.post('/blogs', headers=headers, json={
            'title': title or f'Blog {next(counter)}',
            'body': body,
            'categoryId': category_id,
            'status': status
        })
        assert response.status_code == 201, response.get_json()
        return response.get_json()['blog']

    return _make_blog
