# users_api/models/__init__.py
from .users import User
