"""
API Blueprints for bloglist-api.

Provides:
- users_bp: Account registration and listing
- login_bp: Login, current caller, logout
- blogs_bp: Blog create/show/like/delete and the ranked list
- testing_bp: State reset, only registered in test environments
"""
from .blogs import blogs_bp
from .login import login_bp
from .testing import testing_bp
from .users import users_bp

__all__ = ['blogs_bp', 'login_bp', 'testing_bp', 'users_bp']
