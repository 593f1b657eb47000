"""Use cases for creating, reading, updating and deleting blog posts."""

from __future__ import annotations

from blog_cdc_search.post import Post
from blog_cdc_search.repository import PostRepository


class InvalidPostIdError(ValueError):
    """Raised when a post id is not a positive integer."""

    def __init__(self, message: str = "invalid post ID") -> None:
        super().__init__(message)


def _check_id(post_id: int) -> None:
    if post_id <= 0:
        raise InvalidPostIdError()


class PostService:
    """Business operations on posts backed by a repository."""

    def __init__(self, repo: PostRepository) -> None:
        self.repo = repo

    def create_post(self, title: str, image: str, excerpt: str, body: str) -> Post:
        """Validate and store a new post, returning it with its id set."""
        post = Post.create(title, image, excerpt, body)
        self.repo.create(post)
        return post

    def get_post(self, post_id: int) -> Post:
        """Return the post with the given id."""
        _check_id(post_id)
        return self.repo.get_by_id(post_id)

    def get_all_posts(self) -> list[Post]:
        """Return every post."""
        return self.repo.get_all()

    def update_post(
        self, post_id: int, title: str, image: str, excerpt: str, body: str
    ) -> Post:
        """Replace the content of an existing post and store it."""
        _check_id(post_id)
        post = self.repo.get_by_id(post_id)
        post.update(title, image, excerpt, body)
        self.repo.update(post)
        return post

    def delete_post(self, post_id: int) -> None:
        """Remove the post with the given id."""
        _check_id(post_id)
        self.repo.delete(post_id)