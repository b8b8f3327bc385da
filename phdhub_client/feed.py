"""
Community feed view state.

Like toggles are optimistic: the local flag and count flip at once, a
pending operation holding a rollback closure is registered, and the server
response either replaces the local values (success) or the rollback runs
(failure or cancellation). Comments load lazily on first expand. Comment
submission and post edits wait for the server before touching local state.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from .api import ApiError, HubApiClient


@dataclass
class PostView:
    """One post as rendered, with the viewer's like state"""
    post: Dict[str, Any]
    liked: bool = False
    like_count: int = 0

    @property
    def id(self) -> str:
        return self.post["id"]


@dataclass
class CommentThread:
    comments: List[Dict[str, Any]] = field(default_factory=list)
    loaded: bool = False
    expanded: bool = False
    draft: str = ""
    fetch: Optional[asyncio.Future] = None


@dataclass
class PendingOperation:
    op_id: int
    post_id: str
    kind: str
    rollback: Callable[[], None]


@dataclass
class EditState:
    """Drafts for a post in edit mode"""
    title: str
    content: str
    media_url: Optional[str] = None
    error: Optional[str] = None


class CommunityFeed:
    """View state for one community's post list"""

    def __init__(self, api: HubApiClient, community_id: str, owns_api: bool = False):
        self.api = api
        self.community_id = community_id
        self.owns_api = owns_api

        self.posts: Dict[str, PostView] = {}
        self.threads: Dict[str, CommentThread] = {}
        self.editing: Dict[str, EditState] = {}
        self.pending: Dict[int, PendingOperation] = {}
        self.last_error: Optional[str] = None

        self._op_ids = itertools.count(1)
        self._tasks: Set[asyncio.Future] = set()
        self._closed = False

    # ==================== Task tracking ====================

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Future:
        if self._closed:
            raise RuntimeError("Feed is closed")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _call(self, coro: Awaitable[Any]) -> Any:
        """Run one API call as a task that close() can cancel"""
        return await self._spawn(coro)

    def _register(self, post_id: str, kind: str, rollback: Callable[[], None]) -> PendingOperation:
        op = PendingOperation(op_id=next(self._op_ids), post_id=post_id, kind=kind, rollback=rollback)
        self.pending[op.op_id] = op
        return op

    def has_pending(self, post_id: str, kind: str) -> bool:
        return any(op.post_id == post_id and op.kind == kind for op in self.pending.values())

    # ==================== Loading ====================

    async def load(self) -> List[PostView]:
        """Fetch the community's posts and seed like flags from the caller's likes"""
        rows = await self._call(self.api.list_posts(self.community_id))
        try:
            likes = await self._call(self.api.list_my_likes())
        except ApiError as e:
            # Anonymous viewers have no likes
            if e.status_code != 401:
                raise
            likes = []

        liked_ids = {like["post_id"] for like in likes}
        self.posts = {
            row["id"]: PostView(post=row, liked=row["id"] in liked_ids, like_count=row.get("like_count", 0))
            for row in rows
        }
        return list(self.posts.values())

    async def create_post(self, title: str, content: str, media_url: Optional[str] = None) -> Optional[PostView]:
        try:
            row = await self._call(self.api.create_post(self.community_id, title, content, media_url))
        except ApiError as e:
            self.last_error = e.message
            return None

        view = PostView(post=row, like_count=row.get("like_count", 0))
        self.posts = {view.id: view, **self.posts}
        return view

    # ==================== Likes ====================

    async def toggle_like(self, post_id: str) -> bool:
        """
        Optimistically flip the like, then reconcile with the server.

        A second toggle on a post whose previous toggle is still in flight
        is ignored. Returns False when the toggle was ignored or rolled back.
        """
        view = self.posts[post_id]
        if self.has_pending(post_id, "like"):
            return False

        prev_liked, prev_count = view.liked, view.like_count
        view.liked = not prev_liked
        view.like_count = prev_count + (1 if view.liked else -1)

        def rollback():
            view.liked = prev_liked
            view.like_count = prev_count

        op = self._register(post_id, "like", rollback)
        try:
            result = await self._call(self.api.toggle_like(post_id))
        except ApiError as e:
            op.rollback()
            self.last_error = e.message
            return False
        except BaseException:
            # Cancellation or an unexpected client error
            op.rollback()
            raise
        finally:
            self.pending.pop(op.op_id, None)

        view.liked = result["liked"]
        view.like_count = result["like_count"]
        return True

    # ==================== Comments ====================

    def thread(self, post_id: str) -> CommentThread:
        return self.threads.setdefault(post_id, CommentThread())

    async def expand_comments(self, post_id: str) -> Optional[List[Dict[str, Any]]]:
        """
        Show a post's comments, fetching them only the first time.

        Concurrent expands of the same post share one request. Returns None
        when the fetch fails; the next expand retries.
        """
        thread = self.thread(post_id)
        thread.expanded = True
        if thread.loaded:
            return thread.comments

        if thread.fetch is None:
            thread.fetch = self._spawn(self.api.list_comments(post_id))
        fetch = thread.fetch

        try:
            rows = await asyncio.shield(fetch)
        except ApiError as e:
            if thread.fetch is fetch:
                thread.fetch = None
            self.last_error = e.message
            return None

        if not thread.loaded:
            thread.comments = list(rows)
            thread.loaded = True
            thread.fetch = None
        return thread.comments

    def collapse_comments(self, post_id: str):
        self.thread(post_id).expanded = False

    def set_comment_draft(self, post_id: str, text: str):
        self.thread(post_id).draft = text

    async def submit_comment(self, post_id: str) -> bool:
        """Post the draft; the thread only changes once the server accepts it"""
        thread = self.thread(post_id)
        content = thread.draft.strip()
        if not content:
            return False

        try:
            row = await self._call(self.api.create_comment(post_id, content))
        except ApiError as e:
            self.last_error = e.message
            return False

        thread.comments.append(row)
        thread.draft = ""
        return True

    # ==================== Editing ====================

    def start_edit(self, post_id: str) -> EditState:
        post = self.posts[post_id].post
        state = EditState(title=post["title"], content=post["content"], media_url=post.get("media_url"))
        self.editing[post_id] = state
        return state

    def cancel_edit(self, post_id: str):
        self.editing.pop(post_id, None)

    def is_editing(self, post_id: str) -> bool:
        return post_id in self.editing

    async def save_edit(self, post_id: str) -> bool:
        """Send the drafts; on failure the original post and edit mode stay as they were"""
        state = self.editing[post_id]
        try:
            row = await self._call(self.api.update_post(post_id, state.title, state.content, state.media_url))
        except ApiError as e:
            state.error = e.message
            self.last_error = e.message
            return False

        view = self.posts[post_id]
        view.post = row
        if not self.has_pending(post_id, "like"):
            view.like_count = row.get("like_count", view.like_count)
        self.editing.pop(post_id, None)
        return True

    # ==================== Lifecycle ====================

    async def close(self):
        """Cancel every in-flight request (view unmount)"""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self.owns_api:
            await self.api.aclose()
