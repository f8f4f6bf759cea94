"""Template source model - literal and logic segments."""

from stencil.ast.parser import split_segments
from stencil.ast.spec import Literal, Logic, Segment

__all__ = ["split_segments", "Literal", "Logic", "Segment"]
