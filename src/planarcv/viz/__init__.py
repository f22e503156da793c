from .visualization import (
    DrawParams, make_side_by_side, draw_matches,
    ransac_summary_lines, draw_ransac_summary, show_and_save_matches
)

__all__ = [
    "DrawParams", "make_side_by_side", "draw_matches",
    "ransac_summary_lines", "draw_ransac_summary", "show_and_save_matches"
]
