# SQLModel definitions — imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin, UTCDateTime, as_utc, utcnow  # noqa: F401
from .project import Project  # noqa: F401
from .subscriber import Subscriber, SubscriberScope  # noqa: F401
from .watcher import SubscriptionWatcher  # noqa: F401
