from pydantic import BaseModel
from typing import Optional


class ConnectRequest(BaseModel):
    endpoint_url: str = ""
    access_key: str = ""


class ConnectionStatus(BaseModel):
    state: str
    endpoint_url: Optional[str] = None
    version: int = 0
    error: Optional[str] = None
