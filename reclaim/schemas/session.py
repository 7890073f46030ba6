from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionLogoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[int] = Field(default=None, alias="sessionId")


class SessionLoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    session_id: int = Field(serialization_alias="sessionId")


class SessionLogoutResponse(BaseModel):
    success: bool = True
