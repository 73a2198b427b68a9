from .user import User
from .reading_list import ReadArticle, FavoriteArticle

__all__ = ["User", "ReadArticle", "FavoriteArticle"]
