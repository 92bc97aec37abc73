"""
Results log writer.

Layout is byte-compatible with the legacy simulator's results.log.
"""

from typing import TextIO

from .state import MotionVectorTable

FRAME_BANNER = "*" * 36


def format_frame_header(frame_number: int) -> str:
    return f"\n{FRAME_BANNER} FRAME No.{frame_number:2d} {FRAME_BANNER}\n"


def format_mv_table(table: MotionVectorTable) -> str:
    lines = ["MVs Table (MV_s,MV_y):\n"]
    for _, row in table.rows():
        lines.append("".join(f"({mv.dx},{mv.dy})\t" for mv in row) + "\n")
    return "".join(lines)


def format_sad_table(table: MotionVectorTable) -> str:
    lines = ["SAD_MB Table:\n"]
    for _, row in table.rows():
        lines.append("".join(f"{mv.sad}\t" for mv in row) + "\n")
    return "".join(lines)


class ResultReporter:
    """Appends one block per processed frame to a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.frames_written = 0

    def write_frame(self, frame_number: int, table: MotionVectorTable):
        self.stream.write(format_frame_header(frame_number))
        self.stream.write(format_mv_table(table))
        self.stream.write(format_sad_table(table))
        self.frames_written += 1
