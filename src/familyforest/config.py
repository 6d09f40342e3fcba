"""Layout and traversal settings."""

from dataclasses import dataclass


@dataclass
class LayoutSettings:
    node_width: float = 160.0
    sibling_gap: float = 40.0  # Horizontal space between neighbouring units
    marriage_gap: float = 20.0  # Horizontal space between the two spouses of a couple
    generation_spacing: float = 300.0
    base_x: float = 0.0
    base_y: float = 150.0
    sibling_jitter: float = 0.0  # Vertical stagger for siblings; 0 disables it
    fallback_root_count: int = 2
    order_by_birth: bool = False

    def __post_init__(self):
        if self.node_width <= 0:
            raise ValueError("node_width must be positive")
        if self.sibling_gap < 0 or self.marriage_gap < 0:
            raise ValueError("gaps must not be negative")
        if self.generation_spacing <= 0:
            raise ValueError("generation_spacing must be positive")
        if self.fallback_root_count < 1:
            raise ValueError("fallback_root_count must be at least 1")

    def unit_width(self, couple: bool) -> float:
        if couple:
            return 2 * self.node_width + self.marriage_gap
        return self.node_width
