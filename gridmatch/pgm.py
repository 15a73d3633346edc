"""Writing grids of values as binary PGM images."""

from __future__ import annotations

from typing import BinaryIO, Sequence

__all__ = ["write_pgm"]


def write_pgm(
    stream: BinaryIO, xsize: int, ysize: int, matrix: Sequence[Sequence[float]]
) -> BinaryIO:
    """Write ``matrix[x][y]`` as a P5 image, top row first.

    A value ``v`` becomes the grey level ``255 * |1 - v|``, so 0 is white and
    1 is black.
    """
    stream.write(f"P5\n{xsize}\n{ysize}\n255\n".encode("ascii"))
    for y in range(ysize - 1, -1, -1):
        stream.write(
            bytes(int(255 * abs(1.0 - matrix[x][y])) & 0xFF for x in range(xsize))
        )
    return stream