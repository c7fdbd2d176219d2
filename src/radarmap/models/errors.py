from enum import Enum
from typing import Any

from pydantic import BaseModel


class ProcessingStage(str, Enum):
    LOAD = "load"
    DETECT = "detect"
    RESAMPLE = "resample"
    CLEAN = "clean"
    WRITE = "write"


class ProcessingError(BaseModel):
    stage: ProcessingStage
    error_type: str
    recoverable: bool
    message: str
    details: dict[str, Any] = {}
