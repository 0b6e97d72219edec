"""Response envelopes shared by all routers."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str
