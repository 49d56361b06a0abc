from pydantic import BaseModel


class AccessApplication(BaseModel):
    id: str
    name: str | None = None
    domain: str | None = None


class DnsRecord(BaseModel):
    id: str
    name: str | None = None
    type: str | None = None
    content: str | None = None


class IdentityProvider(BaseModel):
    id: str
    name: str | None = None
    type: str | None = None


class AccessPolicy(BaseModel):
    id: str
    name: str | None = None
