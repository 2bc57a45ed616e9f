"""Source and load circuits attached to the ends of the line."""

from tline_fdtd.boundaries._boundaries import (
    MatchedTerminator,
    MatchedVSource,
    Terminator,
    VSource,
)

__all__ = [
    "VSource",
    "Terminator",
    "MatchedVSource",
    "MatchedTerminator",
]
