# models/body_region.py

from enum import Enum


class BodyRegion(str, Enum):
    """The six fixed anatomical zones needle counts are bucketed into."""

    HEAD = "head"
    TRUNK = "trunk"
    LEFT_ARM = "left-arm"
    RIGHT_ARM = "right-arm"
    LEFT_LEG = "left-leg"
    RIGHT_LEG = "right-leg"

    @property
    def column(self) -> str:
        """Name of the persisted count column, e.g. ``left_arm_count``."""
        return f"{self.value.replace('-', '_')}_count"

    @property
    def label(self) -> str:
        return REGION_LABELS[self]


REGION_LABELS = {
    BodyRegion.HEAD: "Head",
    BodyRegion.TRUNK: "Trunk",
    BodyRegion.LEFT_ARM: "Left arm",
    BodyRegion.RIGHT_ARM: "Right arm",
    BodyRegion.LEFT_LEG: "Left leg",
    BodyRegion.RIGHT_LEG: "Right leg",
}

COUNT_COLUMNS = tuple(region.column for region in BodyRegion)
