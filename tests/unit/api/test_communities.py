"""
Unit Tests for Communities and Events API Endpoints
"""
from datetime import datetime, timedelta
from httpx import AsyncClient
from faker import Faker

fake = Faker()


class TestCommunities:

    async def test_create_and_fetch(self, client: AsyncClient, auth_headers):
        created = await client.post('/api/communities', json={
            'name': 'ML Group',
            'description': 'Machine learning reading group',
            'hashtags': ['ml', ' deep-learning ', ''],
        }, headers=auth_headers)

        assert created.status_code == 201
        data = created.json()
        assert data['hashtags'] == ['ml', 'deep-learning']

        fetched = await client.get(f"/api/communities/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()['name'] == 'ML Group'

    async def test_list_newest_first(self, client: AsyncClient, community, auth_headers):
        created = await client.post('/api/communities', json={
            'name': 'Newer', 'description': fake.text(), 'hashtags': [],
        }, headers=auth_headers)

        response = await client.get('/api/communities')

        assert [c['id'] for c in response.json()] == [created.json()['id'], community.id]

    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post('/api/communities', json={
            'name': 'x', 'description': 'y', 'hashtags': [],
        })

        assert response.status_code == 401

    async def test_unknown_community(self, client: AsyncClient):
        response = await client.get('/api/communities/missing')

        assert response.status_code == 404
        assert response.json()['code'] == 'COMMUNITY_NOT_FOUND'

    async def test_banner_upload_url(self, client: AsyncClient, auth_headers, storage):
        response = await client.post('/api/communities/banner-upload-url', json={
            'fileName': 'cover.jpg', 'fileType': 'image/jpeg',
        }, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['key'].startswith('banners/')
        assert data['key'].endswith('.jpg')
        assert data['public_url'].endswith(data['key'])
        assert storage.uploads == [{'key': data['key'], 'content_type': 'image/jpeg'}]


class TestEvents:

    async def test_events_ordered_by_start(self, client: AsyncClient, auth_headers):
        now = datetime.utcnow()
        for title, offset in [('Later', 5), ('Sooner', 1)]:
            response = await client.post('/api/events', json={
                'title': title,
                'link': 'https://meet.test/abc',
                'startTime': (now + timedelta(days=offset)).isoformat(),
                'endTime': (now + timedelta(days=offset, hours=1)).isoformat(),
            }, headers=auth_headers)
            assert response.status_code == 201

        response = await client.get('/api/events')

        assert [e['title'] for e in response.json()] == ['Sooner', 'Later']

    async def test_end_before_start_rejected(self, client: AsyncClient, auth_headers):
        now = datetime.utcnow()
        response = await client.post('/api/events', json={
            'title': 'Backwards',
            'link': 'https://meet.test/abc',
            'startTime': now.isoformat(),
            'endTime': (now - timedelta(hours=1)).isoformat(),
        }, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    async def test_timezone_offsets_are_normalized(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/events', json={
            'title': 'Offset',
            'link': 'https://meet.test/abc',
            'startTime': '2030-01-01T12:00:00+02:00',
            'endTime': '2030-01-01T13:00:00+02:00',
        }, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()['start_time'].startswith('2030-01-01T10:00:00')

    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post('/api/events', json={
            'title': 'x', 'link': 'y', 'startTime': '2030-01-01T00:00:00', 'endTime': '2030-01-01T01:00:00',
        })

        assert response.status_code == 401
