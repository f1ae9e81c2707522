# SQLModel definitions, imported here to ensure metadata is populated for create_all.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .session import UserSession  # noqa: F401
from .channel import Channel  # noqa: F401
from .member import Member, MemberRole  # noqa: F401
