from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class SubscriptionWatcherQuery(BaseModel):
    project: Optional[UUID] = None
    did_key: str
    sym_key: str
