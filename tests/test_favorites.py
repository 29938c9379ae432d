"""
Integration tests for the favorites routes (GET/POST/DELETE /api/favorites,
POST /api/save-favorite) and the vocabulary service behind them.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from unittest.mock import MagicMock

from app import create_app
from auth.identity import IdentityUser
from models import db
from models.user import User
from models.vocabulary_entry import VocabularyEntry
from services.errors import InvalidInput, Unauthorized
from services.vocabulary_service import (
    delete_vocabulary_entry,
    group_by_category,
    list_vocabulary_entries,
    save_vocabulary_entry,
)

AUTH = {'Authorization': 'Bearer good-token'}
OTHER_AUTH = {'Authorization': 'Bearer other-token'}


@pytest.fixture(scope='function')
def app():
    """Create an app with a fresh in-memory database and a stub identity provider"""
    app = create_app('testing')

    users = {
        'good-token': IdentityUser(id='user-1', email='learner@example.com'),
        'other-token': IdentityUser(id='user-2', email='other@example.com'),
        'apostrophe-token': IdentityUser(id='user-3', email="o'neil@example.com"),
    }

    def get_user(token):
        if token not in users:
            raise Unauthorized('Invalid or expired token')
        return users[token]

    provider = MagicMock()
    provider.get_user.side_effect = get_user
    app.extensions['identity_provider'] = provider

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    """Seed a user and keep an app context open for direct service calls"""
    with app.app_context():
        user = User(id='user-1', email='learner@example.com')
        db.session.add(user)
        db.session.commit()
        yield user


class TestAuthentication:

    def test_missing_header(self, client):
        response = client.get('/api/favorites')

        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Missing or invalid authorization header'}

    def test_not_a_bearer_header(self, client):
        response = client.get('/api/favorites', headers={'Authorization': 'Basic abc'})
        assert response.status_code == 401

    def test_rejected_token(self, app, client):
        response = client.post('/api/favorites', headers={'Authorization': 'Bearer expired'},
                               json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})

        assert response.status_code == 401
        with app.app_context():
            assert VocabularyEntry.query.count() == 0

    def test_first_request_creates_local_user(self, app, client):
        response = client.get('/api/favorites', headers=AUTH)

        assert response.status_code == 200
        with app.app_context():
            user = db.session.get(User, 'user-1')
            assert user.email == 'learner@example.com'
            assert user.last_active_at is not None

    def test_provider_email_stored_as_given(self, app, client):
        response = client.post('/api/favorites', headers={'Authorization': 'Bearer apostrophe-token'},
                               json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})

        assert response.status_code == 200
        with app.app_context():
            assert db.session.get(User, 'user-3').email == "o'neil@example.com"


class TestFavoritesRoutes:

    def test_save_assigns_category(self, client):
        response = client.post('/api/favorites', headers=AUTH,
                               json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['favorite']['word'] == '魚'
        assert data['favorite']['category'] == 'food'

    def test_explicit_category_kept(self, client):
        response = client.post('/api/favorites', headers=AUTH,
                               json={'word': '魚', 'reading': 'さかな', 'english': 'fish', 'category': 'animals'})

        assert response.get_json()['favorite']['category'] == 'animals'

    def test_repeat_save_overwrites(self, app, client):
        client.post('/api/favorites', headers=AUTH, json={'word': '猫', 'reading': 'ねこ', 'english': 'cat'})
        response = client.post('/api/favorites', headers=AUTH,
                               json={'word': '猫', 'reading': 'ねこ', 'english': 'kitty'})

        assert response.status_code == 200
        with app.app_context():
            entries = VocabularyEntry.query.filter_by(user_id='user-1', word='猫').all()
            assert len(entries) == 1
            assert entries[0].english == 'kitty'
            assert entries[0].category == 'vocabulary'

    def test_save_favorite_alias(self, client):
        response = client.post('/api/save-favorite', headers=AUTH,
                               json={'word': '水', 'reading': 'みず', 'english': 'water'})

        assert response.status_code == 200
        assert response.get_json()['favorite']['category'] == 'food'

    @pytest.mark.parametrize('body', [
        {'word': '魚', 'reading': 'さかな'},
        {'word': '', 'reading': 'さかな', 'english': 'fish'},
        {'word': '魚', 'reading': '  ', 'english': 'fish'},
        {},
    ])
    def test_missing_fields(self, client, body):
        response = client.post('/api/favorites', headers=AUTH, json=body)

        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': 'Word, reading, and english are required'}

    def test_list_and_group(self, client):
        client.post('/api/favorites', headers=AUTH, json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})
        client.post('/api/favorites', headers=AUTH, json={'word': '赤', 'reading': 'あか', 'english': 'red'})
        client.post('/api/favorites', headers=AUTH, json={'word': 'ご飯', 'reading': 'ごはん', 'english': 'rice'})

        response = client.get('/api/favorites', headers=AUTH)

        assert response.status_code == 200
        data = response.get_json()
        assert [f['word'] for f in data['favorites']] == ['ご飯', '赤', '魚']
        assert [f['word'] for f in data['grouped']['food']] == ['ご飯', '魚']
        assert [f['word'] for f in data['grouped']['colors']] == ['赤']

    def test_favorites_are_per_user(self, client):
        client.post('/api/favorites', headers=AUTH, json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})

        response = client.get('/api/favorites', headers=OTHER_AUTH)

        assert response.get_json()['favorites'] == []

    def test_delete(self, app, client):
        client.post('/api/favorites', headers=AUTH, json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})

        first = client.delete('/api/favorites', headers=AUTH, json={'word': '魚'})
        second = client.delete('/api/favorites', headers=AUTH, json={'word': '魚'})

        assert first.get_json() == {'success': True, 'deleted': True}
        assert second.get_json() == {'success': True, 'deleted': False}
        with app.app_context():
            assert VocabularyEntry.query.count() == 0

    def test_delete_requires_word(self, client):
        response = client.delete('/api/favorites', headers=AUTH, json={})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Word is required'

    def test_delete_leaves_other_users_alone(self, app, client):
        client.post('/api/favorites', headers=AUTH, json={'word': '魚', 'reading': 'さかな', 'english': 'fish'})

        response = client.delete('/api/favorites', headers=OTHER_AUTH, json={'word': '魚'})

        assert response.get_json()['deleted'] is False
        with app.app_context():
            assert VocabularyEntry.query.count() == 1


class TestVocabularyService:

    def test_save_trims_and_categorizes(self, user):
        entry = save_vocabulary_entry(user.id, ' 犬 ', 'いぬ', 'dog ')

        assert entry.word == '犬'
        assert entry.english == 'dog'
        assert entry.category == 'animals'

    def test_blank_category_is_auto_assigned(self, user):
        entry = save_vocabulary_entry(user.id, '母', 'はは', 'mother', category='  ')
        assert entry.category == 'family'

    def test_missing_required_field(self, user):
        with pytest.raises(InvalidInput):
            save_vocabulary_entry(user.id, '母', None, 'mother')

    def test_upsert_updates_timestamp(self, user):
        first = save_vocabulary_entry(user.id, '母', 'はは', 'mother')
        created_at = first.created_at
        second = save_vocabulary_entry(user.id, '母', 'はは', 'mom')

        assert second.id == first.id
        assert second.created_at == created_at
        assert second.updated_at >= created_at

    def test_group_by_category_keeps_order(self, user):
        save_vocabulary_entry(user.id, '魚', 'さかな', 'fish')
        save_vocabulary_entry(user.id, '猫', 'ねこ', 'cat')
        save_vocabulary_entry(user.id, '水', 'みず', 'water')

        grouped = group_by_category(list_vocabulary_entries(user.id))

        assert list(grouped) == ['food', 'animals']
        assert [entry['word'] for entry in grouped['food']] == ['水', '魚']

    def test_delete_unknown_word(self, user):
        assert delete_vocabulary_entry(user.id, '魚') is False
