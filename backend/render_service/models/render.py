from typing import List
from pydantic import BaseModel, Field, field_validator


class Scene(BaseModel):
    duration: float = Field(gt=0, le=3600)  # seconds
    color: str = Field(default="black", pattern=r"^(#[0-9A-Fa-f]{6}|0x[0-9A-Fa-f]{6}|[A-Za-z]+)$")


class RenderRequest(BaseModel):
    """render request accepted by the built-in ffmpeg renderer"""
    scenes: List[Scene] = Field(min_length=1)
    width: int = Field(default=1280, gt=0, le=7680)
    height: int = Field(default=720, gt=0, le=4320)
    fps: int = Field(default=30, gt=0, le=120)

    @field_validator("width", "height")
    @classmethod
    def must_be_even(cls, value: int) -> int:
        # h.264 with yuv420p needs even dimensions
        if value % 2:
            raise ValueError("must be an even number")
        return value

    @property
    def total_duration(self) -> float:
        return sum(scene.duration for scene in self.scenes)
