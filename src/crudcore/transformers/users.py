from typing import Any

from ..database.schema import Post
from .base import BaseTransformer
from .serializer import Collection


class UserTransformer(BaseTransformer):
    available_includes = ["posts"]

    def include_posts(self, user: Any) -> Collection:
        return self.include_collection(Post, user.posts)
