"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from ordering.models import admin_user as _admin_user  # noqa: E402,F401
from ordering.models import app_setting as _app_setting  # noqa: E402,F401
from ordering.models import invoice as _invoice  # noqa: E402,F401
from ordering.models import menu as _menu  # noqa: E402,F401
from ordering.models import order as _order  # noqa: E402,F401
from ordering.models import restaurant as _restaurant  # noqa: E402,F401
