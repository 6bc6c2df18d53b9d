"""
Export functionality for the pattern log.

Example usage:
    from taiko_engine import PuzzleEngine
    from taiko_engine.export import to_dot_board

    engine = PuzzleEngine(enforce_row_bounds=False)
    engine.submit_pair([("top-0", "bottom-0"), ("top-1", "bottom-1")], "Level 2")

    with open("board.dot", "w") as f:
        f.write(to_dot_board(engine.pattern_log))
"""

from .dot import to_dot, to_dot_board

__all__ = [
    "to_dot",
    "to_dot_board",
]
