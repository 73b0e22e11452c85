# backend/schemas/tracking.py
from typing import List, Optional, Literal
from datetime import datetime
from pydantic import BaseModel

StepState = Literal["complete", "active", "pending"]

class TrackingStep(BaseModel):
    index: int
    key: str
    label: str
    description: str
    state: StepState
    timestamp: Optional[datetime] = None
    synthetic: bool = False  # timestamp estimated, no logged event for this step

class TrackingView(BaseModel):
    order_id: str
    short_id: str
    status: str
    status_label: str
    current_index: Optional[int] = None
    progress_percent: float
    cancelled: bool = False
    tracking_number: Optional[str] = None
    steps: List[TrackingStep]
