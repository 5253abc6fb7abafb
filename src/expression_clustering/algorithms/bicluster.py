"""
Mean-squared-residue biclustering (Cheng & Church, ISMB 2000).

Each extraction starts from the full matrix and deletes rows and columns
until the mean-squared residue (H-score) of the remaining submatrix drops
to ``max_score`` or the size floors are reached. The discovered region is
then overwritten with random noise so the next extraction finds something
else.

Matrix cells are stored as fixed-point integers (value × scaling_factor).
Missing cells and masked regions are filled with uniform integer noise, so
``max_score`` is expressed in fixed-point units squared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import numpy as np

from ..errors import ClusteringCancelled, InvalidInputError
from ..utils.logging_config import get_logger
from .matrix import as_named_matrix

logger = get_logger(__name__)

_INT32_MAX = np.iinfo(np.int32).max


@dataclass
class BiclusterConfig:
    """
    Configuration for bicluster extraction.

    Attributes:
        max_score: Stop deleting once the H-score is at or below this
            (fixed-point units squared).
        min_height: Never shrink the region below this many rows.
        min_width: Never shrink the region below this many columns.
        batch_threshold: While the region has more rows than this, delete
            every row scoring above the H-score in one pass.
        scaling_factor: Multiplier applied before truncating to integers.
        noise_low: Inclusive lower bound of the substitution noise.
        noise_high: Exclusive upper bound of the substitution noise.
        seed: Seed for the noise generator (None -> nondeterministic).
    """

    max_score: float = 1200.0
    min_height: int = 5
    min_width: int = 10
    batch_threshold: int = 100
    scaling_factor: float = 100.0
    noise_low: int = -800
    noise_high: int = 800
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate parameter ranges."""
        if self.max_score < 0:
            raise InvalidInputError(f"max_score must be >= 0, got {self.max_score}")
        if self.min_height < 1:
            raise InvalidInputError(f"min_height must be >= 1, got {self.min_height}")
        if self.min_width < 1:
            raise InvalidInputError(f"min_width must be >= 1, got {self.min_width}")
        if self.batch_threshold < 0:
            raise InvalidInputError(
                f"batch_threshold must be >= 0, got {self.batch_threshold}"
            )
        if self.scaling_factor <= 0:
            raise InvalidInputError(
                f"scaling_factor must be > 0, got {self.scaling_factor}"
            )
        if self.noise_low >= self.noise_high:
            raise InvalidInputError(
                f"Empty noise range [{self.noise_low}, {self.noise_high})"
            )


@dataclass
class ResidueStatistics:
    """
    Row, column and overall statistics of the current submatrix.

    Arrays span the full matrix; entries for excluded rows/columns are NaN.
    Row (column) scores are the mean squared residue across the included
    columns (rows).
    """

    mean: float
    row_means: np.ndarray
    col_means: np.ndarray
    row_scores: np.ndarray
    col_scores: np.ndarray
    h_score: float


def compute_residue_statistics(
    matrix: np.ndarray, rows: np.ndarray, cols: np.ndarray
) -> ResidueStatistics:
    """
    Score the submatrix selected by boolean masks *rows* and *cols*.

    The residue of cell (i, j) is
    ``M[i, j] - row_mean[i] - col_mean[j] + mean``.
    """
    sub = matrix[np.ix_(rows, cols)].astype(np.float64)
    row_means = sub.mean(axis=1)
    col_means = sub.mean(axis=0)
    mean = float(sub.mean())

    resid = sub - row_means[:, None] - col_means[None, :] + mean
    sq = resid * resid

    def spread(values: np.ndarray, mask: np.ndarray) -> np.ndarray:
        full = np.full(mask.shape, np.nan)
        full[mask] = values
        return full

    return ResidueStatistics(
        mean=mean,
        row_means=spread(row_means, rows),
        col_means=spread(col_means, cols),
        row_scores=spread(sq.mean(axis=1), rows),
        col_scores=spread(sq.mean(axis=0), cols),
        h_score=float(sq.mean()),
    )


@dataclass
class Bicluster:
    """One extracted bicluster."""

    row_indices: List[int]
    col_indices: List[int]
    score: float
    n_iter: int = 0
    scaling_factor: float = 100.0
    row_names: Optional[List[str]] = None
    col_names: Optional[List[str]] = None

    @property
    def shape(self) -> tuple:
        return (len(self.row_indices), len(self.col_indices))

    @property
    def unscaled_score(self) -> float:
        """H-score in the units of the input matrix."""
        return self.score / (self.scaling_factor ** 2)


class BiclusterExtractor:
    """
    Extracts biclusters one at a time from a single matrix.

    The matrix is converted once at construction; every ``extract_one`` call
    masks the region it returns, so successive calls yield different
    biclusters. Not safe for concurrent use on one instance.

    Args:
        matrix: Anything ``as_named_matrix`` accepts (NaN / None = missing)
        config: Extraction parameters (defaults to ``BiclusterConfig()``)
        rng: Noise generator; overrides ``config.seed`` when given

    Raises:
        InvalidInputError: If the matrix is empty or holds values that do
            not fit the fixed-point representation
    """

    def __init__(
        self,
        matrix: Any,
        config: Optional[BiclusterConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config if config is not None else BiclusterConfig()
        named = as_named_matrix(matrix)
        if named.n_rows == 0 or named.n_cols == 0:
            raise InvalidInputError(
                f"Matrix must have at least one row and column, got shape {named.shape}"
            )

        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.row_names = named.row_names
        self.col_names = named.col_names
        self.matrix = self._to_fixed_point(named.values)
        self.n_extracted = 0

        logger.info(
            f"Bicluster extractor ready: {self.n_rows}x{self.n_cols} matrix, "
            f"{int(np.isnan(named.values).sum())} missing values"
        )

    @property
    def n_rows(self) -> int:
        return self.matrix.shape[0]

    @property
    def n_cols(self) -> int:
        return self.matrix.shape[1]

    def _noise(self, size) -> np.ndarray:
        return self.rng.integers(
            self.config.noise_low, self.config.noise_high, size=size, dtype=np.int32
        )

    def _to_fixed_point(self, values: np.ndarray) -> np.ndarray:
        missing = np.isnan(values)
        present = values[~missing]
        scaled = np.trunc(present * self.config.scaling_factor)
        if not np.all(np.isfinite(scaled)) or np.any(np.abs(scaled) > _INT32_MAX):
            raise InvalidInputError(
                "Matrix values must be finite and fit in 32 bits after scaling "
                f"by {self.config.scaling_factor}"
            )

        fixed = np.empty(values.shape, dtype=np.int32)
        fixed[~missing] = scaled.astype(np.int32)
        fixed[missing] = self._noise(int(missing.sum()))
        return fixed

    def _delete_multiple(self, rows: np.ndarray, stats: ResidueStatistics) -> int:
        """Drop rows scoring above the H-score; returns how many were dropped."""
        allowed = int(rows.sum()) - self.config.min_height
        if allowed <= 0:
            return 0
        scores = np.where(rows, stats.row_scores, -np.inf)
        candidates = np.flatnonzero(scores > stats.h_score)
        if len(candidates) > allowed:
            # floor reached mid-pass: keep the worst offenders only
            order = np.argsort(-scores[candidates], kind="stable")
            candidates = candidates[order[:allowed]]
        rows[candidates] = False
        return len(candidates)

    def _delete_single(
        self, rows: np.ndarray, cols: np.ndarray, stats: ResidueStatistics
    ) -> bool:
        """Drop the single worst row or column; False when neither may shrink."""
        best_score = 0.0
        best_row = best_col = None

        if rows.sum() > self.config.min_height:
            scores = np.where(rows, stats.row_scores, -np.inf)
            i = int(np.argmax(scores))
            if scores[i] > best_score:
                best_score, best_row = scores[i], i

        if cols.sum() > self.config.min_width:
            scores = np.where(cols, stats.col_scores, -np.inf)
            j = int(np.argmax(scores))
            if scores[j] > best_score:
                best_score, best_row, best_col = scores[j], None, j

        if best_col is not None:
            cols[best_col] = False
            return True
        if best_row is not None:
            rows[best_row] = False
            return True
        return False

    def extract_one(
        self,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
        on_iteration: Optional[Callable[[np.ndarray, np.ndarray, float], None]] = None,
    ) -> Bicluster:
        """
        Find the next bicluster and mask it out of the matrix.

        Args:
            should_stop: Optional hook polled before every deletion step;
                returning True aborts without masking anything
            on_iteration: Optional callback receiving copies of the row and
                column masks plus the H-score after every scoring pass

        Returns:
            Bicluster with sorted row/column indices and its final H-score

        Raises:
            ClusteringCancelled: If *should_stop* returned True
        """
        cfg = self.config
        rows = np.ones(self.n_rows, dtype=bool)
        cols = np.ones(self.n_cols, dtype=bool)
        stats = compute_residue_statistics(self.matrix, rows, cols)
        if on_iteration is not None:
            on_iteration(rows.copy(), cols.copy(), stats.h_score)

        n_iter = 0
        while stats.h_score > cfg.max_score:
            if should_stop is not None and should_stop():
                raise ClusteringCancelled(
                    f"Stopped after {n_iter} deletion steps; matrix left unmasked"
                )

            removed = 0
            if rows.sum() > cfg.batch_threshold:
                removed = self._delete_multiple(rows, stats)
            if not removed and not self._delete_single(rows, cols, stats):
                logger.debug(
                    f"Size floors reached at {int(rows.sum())}x{int(cols.sum())} "
                    f"with H-score {stats.h_score:.6g}"
                )
                break

            n_iter += 1
            stats = compute_residue_statistics(self.matrix, rows, cols)
            logger.debug(
                f"Step {n_iter}: {int(rows.sum())}x{int(cols.sum())}, "
                f"H-score {stats.h_score:.6g}"
            )
            if on_iteration is not None:
                on_iteration(rows.copy(), cols.copy(), stats.h_score)

        row_idx = [int(i) for i in np.flatnonzero(rows)]
        col_idx = [int(j) for j in np.flatnonzero(cols)]
        result = Bicluster(
            row_indices=row_idx,
            col_indices=col_idx,
            score=stats.h_score,
            n_iter=n_iter,
            scaling_factor=cfg.scaling_factor,
            row_names=[self.row_names[i] for i in row_idx] if self.row_names else None,
            col_names=[self.col_names[j] for j in col_idx] if self.col_names else None,
        )

        self.matrix[np.ix_(rows, cols)] = self._noise((len(row_idx), len(col_idx)))
        self.n_extracted += 1
        logger.info(
            f"Bicluster {self.n_extracted}: {result.shape[0]}x{result.shape[1]}, "
            f"H-score {result.score:.6g} after {n_iter} steps"
        )
        return result

    def extract(self, n: int, **kwargs) -> List[Bicluster]:
        """
        Extract *n* successive biclusters.

        Args:
            n: Number of biclusters (>= 1)
            **kwargs: Passed to ``extract_one``

        Raises:
            InvalidInputError: If n < 1
        """
        if n < 1:
            raise InvalidInputError(f"n must be >= 1, got {n}")
        return [self.extract_one(**kwargs) for _ in range(n)]


def extract_biclusters(
    matrix: Any,
    config: Optional[BiclusterConfig] = None,
    n: int = 1,
    *,
    rng: Optional[np.random.Generator] = None,
) -> List[Bicluster]:
    """
    Extract *n* biclusters from *matrix*.

    The caller's matrix is not modified; masking happens on the extractor's
    fixed-point copy.

    Example:
        >>> cfg = BiclusterConfig(max_score=300, min_height=2, min_width=2, seed=0)
        >>> found = extract_biclusters(data, cfg, n=3)
    """
    return BiclusterExtractor(matrix, config, rng=rng).extract(n)
