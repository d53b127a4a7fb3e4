from pydantic import BaseModel, Field


class StopAtShape(BaseModel):
    """Location of a trip's stop along the trip's shape."""

    trip_id: str
    stop_id: str
    shape_point_sequence: int = Field(description="shape_pt_sequence of the matched shape point")
    stop_offset: float = Field(
        default=0.0,
        description="Offset between the matched point and the next one in [0-100[%; always 0",
    )
