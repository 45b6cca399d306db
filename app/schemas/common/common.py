# app/schemas/common/common.py
from pydantic import BaseModel
from typing import Any, Dict, List


class MessageResponse(BaseModel):
    message: str


class ReminderRunResponse(BaseModel):
    ok: bool = True
    processed: int
    success: int
    failed: int
    results: List[Dict[str, Any]]
