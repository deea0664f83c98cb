from __future__ import annotations

from typing import List

from models.db_storage import DBStorage
from models.errors import RecordNotFoundError
from models.post import Post
from services.errors import PostNotFound


class PostsService:
    """Posts CRUD scoped to the owning user."""

    def __init__(self, storage: DBStorage):
        self.storage = storage

    def create(self, user_id: str, title: str, content: str) -> Post:
        return self.storage.create_post(author_id=user_id, title=title, content=content)

    def find_all(self, user_id: str) -> List[Post]:
        return self.storage.list_posts(user_id)

    def find_one(self, post_id: str) -> Post:
        try:
            return self.storage.get_post(post_id)
        except RecordNotFoundError:
            raise PostNotFound()

    def update(self, post_id: str, user_id: str, data: dict) -> Post:
        try:
            return self.storage.update_post(post_id, user_id, **data)
        except RecordNotFoundError:
            raise PostNotFound()

    def remove(self, post_id: str, user_id: str) -> bool:
        try:
            self.storage.delete_post(post_id, user_id)
        except RecordNotFoundError:
            raise PostNotFound()
        return True
