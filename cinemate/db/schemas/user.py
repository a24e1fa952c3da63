from datetime import datetime
from pydantic import BaseModel


class User(BaseModel):
    id: str
    email: str
    name: str
    image: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True
