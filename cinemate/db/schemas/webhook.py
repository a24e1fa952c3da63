from typing import Any
from pydantic import BaseModel


class EmailAddress(BaseModel):
    email_address: str


class IdentityUserData(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email_addresses: list[EmailAddress] = []
    image_url: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def primary_email(self) -> str:
        return self.email_addresses[0].email_address if self.email_addresses else ""


class IdentityWebhook(BaseModel):
    type: str
    data: dict[str, Any]

