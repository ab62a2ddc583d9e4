from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

# Opaque JSON blobs (route/customer notes); never inspected
NotesMap = Optional[Dict[str, Any]]

# --------------------------
# Customers
# --------------------------
class CustomerOut(BaseModel):
    stripe_customer_id: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    subscription_type: Optional[str] = None
    status: Optional[str] = None
    notes: NotesMap = None

class Assignment(BaseModel):
    stop_id: int
    route_id: int
    route_date: Optional[str] = None
    route_driver: Optional[str] = None
    stop_order: int
    stop_type: Optional[str] = None

class CustomerDetail(CustomerOut):
    assignments: List[Assignment] = []

# --------------------------
# Routes
# --------------------------
class RouteIn(BaseModel):
    date: Optional[str] = None
    driver: Optional[str] = None
    notes: NotesMap = None

class RouteOut(BaseModel):
    id: int
    date: Optional[str] = None
    driver: Optional[str] = None
    notes: NotesMap = None

# --------------------------
# Stops
# --------------------------
class StopUpdate(BaseModel):
    stop_order: Optional[int] = Field(None, ge=1)
    stop_type: Optional[str] = None
    visible_to_driver: Optional[bool] = None
    flags: Optional[str] = None
    flag_notes: Optional[str] = None

class StopOrderUpdate(BaseModel):
    stop_id: int
    stop_order: int

# --------------------------
# Pickup events
# --------------------------
class PickupEventPayload(BaseModel):
    stop_id: int
    driver_initials: str
    completed: bool
    notes: Optional[str] = None

class PickupEventOut(PickupEventPayload):
    id: int
    timestamp: datetime
    permanent: Optional[bool] = None

class DateSummary(BaseModel):
    date: str
    total_events: int
    completed_events: int
    pending_events: int
    unique_drivers: List[str] = []
