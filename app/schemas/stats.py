from typing import List

from pydantic import BaseModel, ConfigDict


class StatusCountsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    open: int
    assigned: int
    in_progress: int
    closed: int


class DepartmentCountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    department_id: str
    department_name: str
    count: int


class TicketStatsResponse(BaseModel):
    stats: StatusCountsOut
    by_department: List[DepartmentCountOut]


class DashboardStatsResponse(BaseModel):
    """Admin dashboard counters; in_progress_tickets combines Assigned and In Progress."""

    total_tickets: int
    open_tickets: int
    in_progress_tickets: int
    resolved_tickets: int
    total_departments: int
    total_students: int
    response_time: str
