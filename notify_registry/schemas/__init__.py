from .common import AccountId, Topic, parse_scopes_and_ignore_invalid  # noqa: F401
from .projects import KeyPair, ProjectWithPublicKeys  # noqa: F401
from .subscribers import (  # noqa: F401
    SubscriberAccountAndScopes,
    SubscriberWithProject,
    SubscriberWithScope,
)
from .watchers import SubscriptionWatcherQuery  # noqa: F401
