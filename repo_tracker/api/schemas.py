from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class ApiErrorResponse(BaseModel):
    """Body of every error response. Serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    error: str
    message: str
    details: Optional[str] = None
    status: int
    path: str
    timestamp: datetime
    trace_id: str

class HealthDTO(BaseModel):
    status: str
    timestamp: datetime
    service: str
    version: str

class InfoDTO(BaseModel):
    service: str
    description: str
    version: str
    endpoints: Dict[str, str]
    parameters: Dict[str, str]
    timestamp: datetime
