from .user import User
from .content import Content, CONTENT_CATEGORIES
from .token import SoulboundToken
