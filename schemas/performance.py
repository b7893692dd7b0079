from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, RootModel


class LCPReportIn(BaseModel):
    value: float = Field(..., ge=0, description="LCP start time in milliseconds")
    url: str = Field(..., min_length=1, max_length=2048)


MetricValue = Optional[Union[float, Dict[str, Any]]]


class PerformanceBundleIn(RootModel[Dict[str, MetricValue]]):
    """Metric name -> number (or nested timing object)."""


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
