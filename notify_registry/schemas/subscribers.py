from datetime import datetime
from typing import Set
from uuid import UUID

from pydantic import BaseModel

from .common import AccountId, Topic


class SubscriberWithScope(BaseModel):
    id: UUID
    project: UUID
    account: AccountId
    sym_key: str
    topic: Topic
    scope: Set[UUID]
    expiry: datetime


class SubscriberWithProject(BaseModel):
    # App domain that the subscription refers to
    app_domain: str
    # Authenticates topic JWTs and sets their aud field
    authentication_public_key: str
    account: AccountId
    # Symmetric key of the notify topic; sha256 of it is the topic itself
    sym_key: str
    # Notification types enabled for this subscription
    scope: Set[UUID]
    expiry: datetime


class SubscriberAccountAndScopes(BaseModel):
    account: AccountId
    scope: Set[UUID]
