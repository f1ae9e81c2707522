"""Persistence layer. Raises ``channelhub.core.errors.DataError`` subclasses only."""

from .channels import ChannelStore  # noqa: F401
from .users import UserStore  # noqa: F401
