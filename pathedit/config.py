"""Pydantic settings consumed by the edit engine.

``ViewState`` is snapshotted from the host once per operation and passed
explicitly to the hit tester and snap engine, so nothing reads zoom or the
snap toggle from module state.
"""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

ZOOM_FLOOR = 1e-9


class ViewState(BaseModel):
    zoom: float = Field(1.0, gt=0.0, description="Current canvas zoom (screen px per world unit).")
    snap_enabled: bool = Field(True, description="Global endpoint snapping toggle.")
    snap_threshold_px: float = Field(
        25.0, gt=0.0, description="Endpoint snap radius expressed in screen pixels."
    )

    def pixels_to_world(self, px: float) -> float:
        return float(px) / max(self.zoom, ZOOM_FLOOR)

    @property
    def snap_threshold(self) -> float:
        """Snap radius in world units at the current zoom."""
        return self.pixels_to_world(self.snap_threshold_px)


class EngineSettings(BaseModel):
    hit_tolerance_px: float = Field(8.0, ge=0.0, description="Extra pick slack around point markers, in pixels.")
    anchor_radius_px: float = Field(7.0, gt=0.0, description="Drawn radius of anchor markers, in pixels.")
    control_radius_px: float = Field(5.0, gt=0.0, description="Drawn radius of control handles, in pixels.")
    link_tolerance: float = Field(
        1e-3, ge=0.0, description="World distance under which anchors are treated as one joint."
    )
    nudge_step: float = Field(1.0, gt=0.0, description="Arrow-key nudge distance.")
    nudge_step_large: float = Field(10.0, gt=0.0, description="Arrow-key nudge distance with modifier held.")
    couple_handles: bool = Field(
        True, description="Carry adjacent cubic handles along when an anchor is dragged."
    )
    merge_on_edit: bool = Field(
        True, description="Fuse shapes when a dragged endpoint is dropped on another shape's endpoint."
    )


class DrawingStyle(BaseModel):
    stroke: str = Field("#ffffff", description="Default stroke colour for new shapes.")
    stroke_width: float = Field(2.0, gt=0.0, description="Default stroke width for new shapes.")

    @field_validator("stroke")
    @classmethod
    def _check_stroke(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Stroke colour must be a non-empty string")
        return value


__all__ = ["ViewState", "EngineSettings", "DrawingStyle", "ZOOM_FLOOR"]
