"""Dense matrices with Gauss-Jordan inversion and determinants."""

from __future__ import annotations

from numbers import Real
from typing import Iterable, List, Sequence, Tuple, Union

__all__ = [
    "MatrixError",
    "NotInvertibleMatrixError",
    "IncompatibleMatrixError",
    "NotSquareMatrixError",
    "DMatrix",
]


class MatrixError(ArithmeticError):
    """Base class of matrix errors."""


class NotInvertibleMatrixError(MatrixError):
    """The matrix is singular or not square."""


class IncompatibleMatrixError(MatrixError):
    """The operands' dimensions do not fit the operation."""


class NotSquareMatrixError(MatrixError):
    """The operation needs a square matrix."""


class DMatrix:
    """A dense matrix of numbers; dimensions are at least one."""

    def __init__(self, rows: int = 0, columns: int = 0) -> None:
        rows = max(rows, 1)
        columns = max(columns, 1)
        self._data: List[List[float]] = [[0.0] * columns for _ in range(rows)]

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[float]]) -> DMatrix:
        """Build a matrix from a sequence of equally long rows."""
        data = [[float(v) for v in row] for row in rows]
        if not data or not data[0] or any(len(r) != len(data[0]) for r in data):
            raise ValueError("rows must be non-empty and of equal length")
        matrix = cls(len(data), len(data[0]))
        matrix._data = data
        return matrix

    @classmethod
    def identity(cls, n: int) -> DMatrix:
        """The ``n`` by ``n`` identity matrix."""
        matrix = cls(n, n)
        for i in range(matrix.rows):
            matrix._data[i][i] = 1.0
        return matrix

    @property
    def rows(self) -> int:
        return len(self._data)

    @property
    def columns(self) -> int:
        return len(self._data[0])

    def __getitem__(self, index: Union[int, Tuple[int, int]]):
        """A row by index, or an element by ``(row, column)``."""
        if isinstance(index, tuple):
            i, j = index
            return self._data[i][j]
        return self._data[index]

    def __setitem__(self, index: Union[int, Tuple[int, int]], value) -> None:
        if isinstance(index, tuple):
            i, j = index
            self._data[i][j] = value
            return
        row = list(value)
        if len(row) != self.columns:
            raise IncompatibleMatrixError("row length does not match")
        self._data[index] = row

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DMatrix):
            return NotImplemented
        return self._data == other._data

    def _copy(self) -> List[List[float]]:
        return [list(row) for row in self._data]

    def det(self) -> float:
        """Determinant, by Gaussian elimination."""
        if self.rows != self.columns:
            raise NotSquareMatrixError("determinant needs a square matrix")
        n = self.rows
        a = self._copy()
        d = 1.0
        for i in range(n):
            k = next((r for r in range(i, n) if a[r][i] != 0), None)
            if k is None:
                return 0.0
            val = a[k][i]
            a[k] = [x / val for x in a[k]]
            d *= val
            if k != i:
                a[k], a[i] = a[i], a[k]
                d = -d
            for j in range(i + 1, n):
                tmp = a[j][i]
                if tmp != 0:
                    a[j] = [x - tmp * y for x, y in zip(a[j], a[i])]
        return d

    def inverse(self) -> DMatrix:
        """Inverse, by Gauss-Jordan elimination."""
        if self.rows != self.columns:
            raise NotInvertibleMatrixError("only square matrices can be inverted")
        n = self.rows
        a = self._copy()
        b = DMatrix.identity(n)._data
        for i in range(n):
            k = next((r for r in range(i, n) if a[r][i] != 0), None)
            if k is None:
                raise NotInvertibleMatrixError("matrix is singular")
            val = a[k][i]
            a[k] = [x / val for x in a[k]]
            b[k] = [x / val for x in b[k]]
            if k != i:
                a[k], a[i] = a[i], a[k]
                b[k], b[i] = b[i], b[k]
            for j in range(n):
                if j != i:
                    tmp = a[j][i]
                    a[j] = [x - tmp * y for x, y in zip(a[j], a[i])]
                    b[j] = [x - tmp * y for x, y in zip(b[j], b[i])]
        return DMatrix.from_rows(b)

    def transpose(self) -> DMatrix:
        return DMatrix.from_rows(zip(*self._data))

    def __mul__(self, other: object) -> DMatrix:
        """Matrix product, or scaling by a number."""
        if isinstance(other, DMatrix):
            if self.columns != other.rows:
                raise IncompatibleMatrixError("inner dimensions differ")
            cols = list(zip(*other._data))
            return DMatrix.from_rows(
                [sum(x * y for x, y in zip(row, col)) for col in cols]
                for row in self._data
            )
        if isinstance(other, Real):
            return DMatrix.from_rows([x * other for x in row] for row in self._data)
        return NotImplemented

    def _elementwise(self, other: DMatrix, sign: float) -> DMatrix:
        if self.rows != other.rows or self.columns != other.columns:
            raise IncompatibleMatrixError("dimensions differ")
        return DMatrix.from_rows(
            [x + sign * y for x, y in zip(r1, r2)]
            for r1, r2 in zip(self._data, other._data)
        )

    def __add__(self, other: object) -> DMatrix:
        if not isinstance(other, DMatrix):
            return NotImplemented
        return self._elementwise(other, 1.0)

    def __sub__(self, other: object) -> DMatrix:
        if not isinstance(other, DMatrix):
            return NotImplemented
        return self._elementwise(other, -1.0)

    def __str__(self) -> str:
        return (
            "{"
            + ",".join(
                "{" + ",".join(format(v, "g") for v in row) + "}" for row in self._data
            )
            + "}"
        )

    def __repr__(self) -> str:
        return f"DMatrix.from_rows({self._data!r})"

    def tolist(self) -> List[List[float]]:
        """The elements as a fresh list of rows."""
        return self._copy()


def _rows_close(a: Sequence[Sequence[float]], b: Sequence[Sequence[float]]) -> bool:
    return all(abs(x - y) < 1e-9 for ra, rb in zip(a, b) for x, y in zip(ra, rb))