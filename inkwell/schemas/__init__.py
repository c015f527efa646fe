from inkwell.schemas.user import (
    UserCreate,
    UserResponse,
    UserProfile,
    AuthorSummary,
    Token,
    LoginRequest,
)
from inkwell.schemas.poem import PoemCreate, PoemUpdate, PoemResponse
from inkwell.schemas.comment import CommentCreate, CommentResponse
