"""
Unit Tests for Posts API Endpoints
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient
from sqlalchemy import select, func
from faker import Faker

from phdhub.models import Post
from tests.conftest import auth_headers_for

fake = Faker()


class TestPostListing:
    """Test GET /api/posts"""

    async def test_missing_community_id_is_rejected_without_query(self, client: AsyncClient, statement_counter):
        """A list request without communityId fails before touching the store"""
        statement_counter.clear()

        response = await client.get('/api/posts')

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'
        assert statement_counter == []

    async def test_list_enriches_authors_with_one_lookup(self, client: AsyncClient, db_session, community, identity):
        """Every row carries author fields; all authors resolve in one batch"""
        authors = [f'user_{i}' for i in range(3)]
        for author in authors:
            identity.add_user(author, username=f'name_{author}')
            for _ in range(2):
                db_session.add(Post(community_id=community.id, author_id=author,
                                    title=fake.sentence(), content=fake.text()))
        await db_session.commit()

        response = await client.get('/api/posts', params={'communityId': community.id})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 6
        for row in data:
            assert row['author_username'] == f"name_{row['author_id']}"
            assert row['author_profile_image_url'] == f"https://img.test/{row['author_id']}.png"
        assert len(identity.calls) == 1
        assert sorted(identity.calls[0]) == authors

    async def test_list_is_newest_first(self, client: AsyncClient, post, auth_headers, community):
        """A freshly created post is the first element, exactly once"""
        create = await client.post('/api/posts', json={
            'communityId': community.id,
            'title': 'Newest',
            'content': fake.text(),
        }, headers=auth_headers)
        assert create.status_code == 201
        new_id = create.json()['id']

        response = await client.get('/api/posts', params={'communityId': community.id})

        ids = [row['id'] for row in response.json()]
        assert ids[0] == new_id
        assert ids.count(new_id) == 1
        assert post.id in ids

    async def test_list_other_community_is_empty(self, client: AsyncClient, post):
        response = await client.get('/api/posts', params={'communityId': 'no-such-community'})

        assert response.status_code == 200
        assert response.json() == []

    async def test_optional_paging(self, client: AsyncClient, db_session, community, user_id):
        """Paging applies only when asked for"""
        now = datetime.utcnow()
        for i in range(5):
            db_session.add(Post(community_id=community.id, author_id=user_id,
                                title=f'Post {i}', content=fake.text(),
                                created_at=now - timedelta(minutes=i)))
        await db_session.commit()

        full = await client.get('/api/posts', params={'communityId': community.id})
        page = await client.get('/api/posts', params={'communityId': community.id, 'page': 2, 'page_size': 2})

        assert len(full.json()) == 5
        assert [p['id'] for p in page.json()] == [p['id'] for p in full.json()[2:4]]


class TestPostCreation:
    """Test POST /api/posts"""

    async def test_create_post_authenticated(self, client: AsyncClient, auth_headers, community, user_id, identity):
        response = await client.post('/api/posts', json={
            'communityId': community.id,
            'title': 'Hello',
            'content': 'World',
        }, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data['title'] == 'Hello'
        assert data['author_id'] == user_id
        assert data['like_count'] == 0
        assert data['media_url'] is None
        assert data['author_username'] == identity.users[user_id]['username']

    async def test_create_post_unauthenticated_writes_nothing(self, client: AsyncClient, db_session, community):
        response = await client.post('/api/posts', json={
            'communityId': community.id,
            'title': 'Hello',
            'content': 'World',
        })

        assert response.status_code == 401
        assert response.json()['code'] == 'UNAUTHORIZED'
        count = await db_session.scalar(select(func.count()).select_from(Post))
        assert count == 0

    async def test_create_post_with_invalid_token(self, client: AsyncClient, community):
        response = await client.post('/api/posts', json={
            'communityId': community.id, 'title': 'a', 'content': 'b',
        }, headers={'Authorization': 'Bearer not-a-token'})

        assert response.status_code == 401

    async def test_create_post_accepts_session_cookie(self, client: AsyncClient, community, user_id):
        from tests.conftest import make_session_token

        client.cookies.set('__session', make_session_token(user_id))
        response = await client.post('/api/posts', json={
            'communityId': community.id, 'title': 'Cookie', 'content': 'auth',
        })
        client.cookies.clear()

        assert response.status_code == 201
        assert response.json()['author_id'] == user_id

    @pytest.mark.parametrize('missing', ['communityId', 'title', 'content'])
    async def test_create_post_missing_field(self, client: AsyncClient, auth_headers, community, missing):
        body = {'communityId': community.id, 'title': 'Hello', 'content': 'World'}
        body.pop(missing)

        response = await client.post('/api/posts', json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    async def test_create_post_unknown_community(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/posts', json={
            'communityId': 'missing', 'title': 'Hello', 'content': 'World',
        }, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['code'] == 'COMMUNITY_NOT_FOUND'

    async def test_create_post_survives_identity_outage(self, client: AsyncClient, db_session, auth_headers, community, user_id, identity):
        """A committed post is reported as created even when author lookup fails"""
        identity.unavailable = True

        response = await client.post('/api/posts', json={
            'communityId': community.id, 'title': 'Outage', 'content': 'still saved',
        }, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data['author_id'] == user_id
        assert data['author_username'] is None
        assert data['author_profile_image_url'] is None
        count = await db_session.scalar(select(func.count()).select_from(Post))
        assert count == 1


class TestPostUpdate:
    """Test PUT /api/posts"""

    async def test_author_can_edit(self, client: AsyncClient, post, auth_headers):
        response = await client.put('/api/posts', json={
            'postId': post.id,
            'title': 'Edited title',
            'content': 'Edited content',
            'mediaUrl': 'https://media.test/x.png',
        }, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['title'] == 'Edited title'
        assert data['content'] == 'Edited content'
        assert data['media_url'] == 'https://media.test/x.png'
        assert data['author_username'] is not None

    async def test_partial_edit_keeps_other_fields(self, client: AsyncClient, post, auth_headers):
        response = await client.put('/api/posts', json={'postId': post.id, 'title': 'Only title'},
                                    headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['title'] == 'Only title'
        assert response.json()['content'] == post.content

    async def test_non_author_edit_is_rejected(self, client: AsyncClient, db_session, post, identity):
        identity.add_user('intruder')
        post_id, original_title = post.id, post.title

        response = await client.put('/api/posts', json={
            'postId': post_id, 'title': 'Hijacked', 'content': 'Hijacked',
        }, headers=auth_headers_for('intruder'))

        assert response.status_code == 404
        assert response.json()['code'] == 'NOT_FOUND_OR_UNAUTHORIZED'
        title = await db_session.scalar(select(Post.title).where(Post.id == post_id))
        assert title == original_title

    async def test_missing_post_looks_like_foreign_post(self, client: AsyncClient, auth_headers):
        response = await client.put('/api/posts', json={
            'postId': 'does-not-exist', 'title': 'x', 'content': 'y',
        }, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['code'] == 'NOT_FOUND_OR_UNAUTHORIZED'

    async def test_edit_survives_identity_outage(self, client: AsyncClient, db_session, post, auth_headers, identity):
        """A committed edit is reported as saved even when author lookup fails"""
        post_id = post.id
        identity.unavailable = True

        response = await client.put('/api/posts', json={
            'postId': post_id, 'title': 'Edited offline',
        }, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['title'] == 'Edited offline'
        assert response.json()['author_username'] is None
        title = await db_session.scalar(select(Post.title).where(Post.id == post_id))
        assert title == 'Edited offline'


class TestPostRetrieval:
    async def test_get_post(self, client: AsyncClient, post):
        response = await client.get(f'/api/posts/{post.id}')

        assert response.status_code == 200
        assert response.json()['id'] == post.id
        assert 'author_username' in response.json()

    async def test_get_missing_post(self, client: AsyncClient):
        response = await client.get('/api/posts/nope')

        assert response.status_code == 404
        assert response.json() == {
            'error': 'Post not found',
            'code': 'POST_NOT_FOUND',
            'details': {'resource_type': 'Post', 'resource_id': 'nope'},
        }
