"""
Unit Tests for Comments API Endpoints
"""
from httpx import AsyncClient
from sqlalchemy import select, func
from faker import Faker

from phdhub.models import Comment

fake = Faker()


class TestCommentListing:

    async def test_missing_post_id(self, client: AsyncClient):
        response = await client.get('/api/comments')

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    async def test_new_comment_is_last(self, client: AsyncClient, comment, post, auth_headers):
        """Comments are oldest first, so a new one lands at the end"""
        created = await client.post('/api/comments', json={
            'postId': post.id, 'content': 'Latest thought',
        }, headers=auth_headers)
        assert created.status_code == 201

        response = await client.get('/api/comments', params={'postId': post.id})

        ids = [row['id'] for row in response.json()]
        assert ids == [comment.id, created.json()['id']]

    async def test_comments_carry_author_fields(self, client: AsyncClient, comment, post, user_id, identity):
        response = await client.get('/api/comments', params={'postId': post.id})

        row = response.json()[0]
        assert row['author_id'] == user_id
        assert row['author_username'] == identity.users[user_id]['username']
        assert row['author_profile_image_url'] == identity.users[user_id]['image_url']
        assert len(identity.calls) == 1


class TestCommentCreation:

    async def test_author_is_the_caller(self, client: AsyncClient, post, auth_headers, user_id, identity):
        response = await client.post('/api/comments', json={
            'postId': post.id, 'content': fake.sentence(), 'communityId': post.community_id,
        }, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data['author_id'] == user_id
        assert data['author_username'] == identity.users[user_id]['username']

    async def test_requires_auth(self, client: AsyncClient, db_session, post):
        response = await client.post('/api/comments', json={'postId': post.id, 'content': 'hi'})

        assert response.status_code == 401
        assert await db_session.scalar(select(func.count()).select_from(Comment)) == 0

    async def test_empty_content_rejected(self, client: AsyncClient, post, auth_headers):
        response = await client.post('/api/comments', json={'postId': post.id, 'content': ''},
                                     headers=auth_headers)

        assert response.status_code == 400

    async def test_unknown_post(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/comments', json={'postId': 'ghost', 'content': 'hi'},
                                     headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['code'] == 'POST_NOT_FOUND'

    async def test_comment_survives_identity_outage(self, client: AsyncClient, db_session, post, auth_headers, user_id, identity):
        """A committed comment is reported as created even when author lookup fails"""
        post_id = post.id
        identity.unavailable = True

        response = await client.post('/api/comments', json={'postId': post_id, 'content': 'saved anyway'},
                                     headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data['author_id'] == user_id
        assert data['author_username'] is None
        count = await db_session.scalar(
            select(func.count()).select_from(Comment).where(Comment.post_id == post_id)
        )
        assert count == 1

    async def test_listing_during_identity_outage_fails(self, client: AsyncClient, comment, post, identity):
        identity.unavailable = True

        response = await client.get('/api/comments', params={'postId': post.id})

        assert response.status_code == 500
        assert response.json()['code'] == 'IDENTITY_SERVICE_ERROR'
