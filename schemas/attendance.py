from pydantic import BaseModel, Field, RootModel, model_validator
from datetime import date as dt_date
from typing import Annotated, List, Literal, Optional, Union

# 1. One attendance mark
class AttendanceRecord(BaseModel):
    student_id: int
    class_id: Optional[int] = None
    date: dt_date
    status: Literal["present", "absent", "leave"] = "present"
    remarks: Optional[str] = None

class AttendanceOut(AttendanceRecord):
    id: int

    class Config:
        from_attributes = True

# 2. Tagged payload shapes
class SingleAttendance(BaseModel):
    shape: Literal["single"]
    record: AttendanceRecord

class BatchAttendance(BaseModel):
    shape: Literal["batch"]
    records: List[AttendanceRecord] = Field(min_length=1)

class AttendanceSubmission(RootModel[Annotated[Union[SingleAttendance, BatchAttendance], Field(discriminator="shape")]]):
    """
    POST /api/attendance body.

    Clients should send ``{"shape": "single", "record": {...}}`` or
    ``{"shape": "batch", "records": [...]}``. Older clients post a bare list,
    a bare record or ``{"records": [...]}``; those are tagged here before
    validation so the handler only ever sees the two tagged shapes.
    """

    @model_validator(mode="before")
    @classmethod
    def tag_untagged_payloads(cls, data):
        if isinstance(data, list):
            return {"shape": "batch", "records": data}
        if isinstance(data, dict) and "shape" not in data:
            if "records" in data:
                return {"shape": "batch", "records": data["records"]}
            return {"shape": "single", "record": data}
        return data

    @property
    def records(self) -> List[AttendanceRecord]:
        if isinstance(self.root, SingleAttendance):
            return [self.root.record]
        return self.root.records
