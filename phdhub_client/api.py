"""HTTP client for the forum endpoints"""

from typing import Optional, List, Dict, Any

import httpx

from .config import ClientConfig


class ApiError(Exception):
    """Non-2xx response or transport failure"""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            body.get("error") or f"HTTP {response.status_code}",
            status_code=response.status_code,
            code=body.get("code"),
        )


class HubApiClient:
    """
    Thin async wrapper over the PhD Hub REST API.

    Every call has an explicit timeout and can be cancelled by cancelling
    the awaiting task.
    """

    def __init__(self, config: Optional[ClientConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or ClientConfig()
        headers = {}
        if self.config.session_token:
            headers["Authorization"] = f"Bearer {self.config.session_token}"
        self._client = httpx.AsyncClient(
            base_url=self.config.api_base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(self.config.timeout, connect=self.config.connect_timeout),
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"Request failed: {e}")
        if response.is_error:
            raise ApiError.from_response(response)
        try:
            return response.json()
        except ValueError:
            raise ApiError(
                f"Unreadable response from {method} {path}",
                status_code=response.status_code,
                code="INVALID_RESPONSE",
            )

    # Posts
    async def list_posts(self, community_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", "/posts", params={"communityId": community_id})

    async def create_post(self, community_id: str, title: str, content: str,
                          media_url: Optional[str] = None) -> Dict[str, Any]:
        body = {"communityId": community_id, "title": title, "content": content}
        if media_url:
            body["mediaUrl"] = media_url
        return await self._request("POST", "/posts", json=body)

    async def update_post(self, post_id: str, title: str, content: str,
                          media_url: Optional[str] = None) -> Dict[str, Any]:
        body = {"postId": post_id, "title": title, "content": content}
        if media_url is not None:
            body["mediaUrl"] = media_url
        return await self._request("PUT", "/posts", json=body)

    # Comments
    async def list_comments(self, post_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", "/comments", params={"postId": post_id})

    async def create_comment(self, post_id: str, content: str) -> Dict[str, Any]:
        return await self._request("POST", "/comments", json={"postId": post_id, "content": content})

    # Likes
    async def toggle_like(self, post_id: str) -> Dict[str, Any]:
        result = await self._request("POST", "/likes", json={"postId": post_id})
        if not isinstance(result, dict) or "liked" not in result or "like_count" not in result:
            raise ApiError("Malformed like toggle response", code="INVALID_RESPONSE")
        return result

    async def list_my_likes(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/likes")

    async def aclose(self):
        await self._client.aclose()
