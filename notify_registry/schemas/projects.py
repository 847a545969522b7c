from pydantic import BaseModel, Field


class KeyPair(BaseModel):
    """An encoded key pair as produced by the key encoding collaborator."""

    public_key: str
    private_key: str = Field(repr=False)


class ProjectWithPublicKeys(BaseModel):
    authentication_public_key: str
    subscribe_public_key: str
