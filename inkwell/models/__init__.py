from inkwell.models.user import User
from inkwell.models.poem import Poem
from inkwell.models.comment import Comment
from inkwell.models.engagement import Follow, Like

__all__ = ["User", "Poem", "Comment", "Follow", "Like"]
