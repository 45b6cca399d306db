# app/schemas/metrics/metrics.py
from pydantic import BaseModel
from typing import List


class MetricsPeriod(BaseModel):
    last_24h: str
    last_7d: str


class WindowCounts(BaseModel):
    last_24h: int
    last_7d: int


class ReasonCount(BaseModel):
    reason: str
    count: int


class SecurityMetrics(BaseModel):
    suspicious_events_24h: int
    by_reason: List[ReasonCount]


class MetricsSummaryResponse(BaseModel):
    timestamp: str
    period: MetricsPeriod
    leads: WindowCounts
    bookings: WindowCounts
    security: SecurityMetrics
