from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class UserDataRequest(BaseModel):
    """
    Envelope of the user-data function: one action name, the caller's
    session token and the action's payload.
    """
    action: str = Field(..., min_length=1, max_length=50)
    token: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
