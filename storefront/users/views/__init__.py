"""
Storefront Users Views Package

Authentication (register, login, logout) and the current-session endpoint.
"""

from .auth_views import LoginView, LogoutView, RegisterView
from .user_self_info import CurrentUserView
