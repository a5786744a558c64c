from typing import Any, Dict, Optional

from .base import BaseTransformer
from .serializer import Item


class PostTransformer(BaseTransformer):
    available_includes = ["user"]

    def transform(self, post: Any) -> Dict[str, Any]:
        data = super().transform(post)
        data["excerpt"] = (post.body or "")[:140]
        return data

    def include_user(self, post: Any) -> Optional[Item]:
        return self.include_item(post.user)
