from models.base_model import Base
from models.user import User
from models.refresh_token import RefreshToken
from models.db_storage import DBStorage, save

__all__ = ["Base", "User", "RefreshToken", "DBStorage", "save"]
