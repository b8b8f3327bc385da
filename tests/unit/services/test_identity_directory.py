"""
Unit Tests for the identity provider user directory
"""
import httpx
import pytest

from phdhub.core.exceptions import IdentityServiceError
from phdhub.modules.identity import IdentityDirectory, IdentityProfile


def provider(requests: list, status_code: int = 200):
    """Mock user-list endpoint that echoes known ids back"""
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        ids = request.url.params.get_list('user_id')
        users = [
            {'id': uid, 'username': f'name_{uid}', 'image_url': f'https://img.test/{uid}',
             'first_name': 'First', 'last_name': None,
             'email_addresses': [{'email_address': f'{uid}@example.edu'}]}
            for uid in ids if not uid.startswith('deleted')
        ]
        return httpx.Response(status_code, json=users)
    return httpx.MockTransport(handler)


class TestIdentityDirectory:

    async def test_one_request_per_batch(self):
        requests = []
        directory = IdentityDirectory(api_url='https://identity.test/v1', secret_key='sk', transport=provider(requests))
        ids = [f'u{i}' for i in range(250)]

        profiles = await directory.get_profiles(ids + ids[:10])

        assert len(requests) == 3
        assert [len(r.url.params.get_list('user_id')) for r in requests] == [100, 100, 50]
        assert requests[0].url.params['limit'] == '100'
        assert requests[0].headers['Authorization'] == 'Bearer sk'
        assert requests[0].url.path == '/v1/users'
        assert len(profiles) == 250
        assert profiles['u7'].username == 'name_u7'
        assert profiles['u7'].email == 'u7@example.edu'

    async def test_unknown_users_get_empty_profiles(self):
        directory = IdentityDirectory(api_url='https://identity.test', secret_key='sk', transport=provider([]))

        profiles = await directory.get_profiles(['deleted_1', None, 'alive'])

        assert set(profiles) == {'deleted_1', 'alive'}
        assert profiles['deleted_1'] == IdentityProfile(id='deleted_1')
        assert profiles['deleted_1'].display_name() == 'User'

    async def test_no_ids_no_request(self):
        requests = []
        directory = IdentityDirectory(api_url='https://identity.test', secret_key='sk', transport=provider(requests))

        assert await directory.get_profiles([]) == {}
        assert requests == []

    async def test_unconfigured_directory_skips_lookup(self):
        requests = []
        directory = IdentityDirectory(api_url='https://identity.test', secret_key='', transport=provider(requests))

        profiles = await directory.get_profiles(['u1'])

        assert profiles['u1'].username is None
        assert requests == []

    async def test_provider_error_raises(self):
        directory = IdentityDirectory(api_url='https://identity.test', secret_key='sk',
                                      transport=provider([], status_code=503))

        with pytest.raises(IdentityServiceError):
            await directory.get_profiles(['u1'])

    async def test_get_profile(self):
        directory = IdentityDirectory(api_url='https://identity.test', secret_key='sk', transport=provider([]))

        profile = await directory.get_profile('u1')

        assert profile.full_name == 'First'
        assert profile.display_name() == 'First'


class TestIdentityProfile:

    def test_from_api_falls_back_to_profile_image_url(self):
        profile = IdentityProfile.from_api({'id': 'u1', 'profile_image_url': 'https://img.test/old'})

        assert profile.image_url == 'https://img.test/old'
        assert profile.email is None

    def test_display_name_prefers_full_name(self):
        assert IdentityProfile(id='u', username='ada', first_name='Ada', last_name='L').display_name() == 'Ada L'
        assert IdentityProfile(id='u', username='ada').display_name() == 'ada'
