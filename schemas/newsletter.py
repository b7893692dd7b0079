from typing import Optional

from pydantic import BaseModel


class SubscribeRequest(BaseModel):
    email: str = ""
    name: Optional[str] = None
