"""Block-local brightness statistics with smooth per-pixel interpolation."""

from dataclasses import dataclass, field

import numpy as np

MEAN = "mean"
MINMAX = "minmax"


@dataclass
class BlockGrid:
    """
    Aggregates of a brightness plane over square tiles.

    Each grid has shape (blocks_y, blocks_x). Values are treated as samples
    located at the block centres when interpolating.
    """

    block_size: int
    shape: tuple[int, int]  # (height, width) of the source plane
    grids: dict[str, np.ndarray] = field(default_factory=dict)

    def __getitem__(self, name: str) -> np.ndarray:
        return self.grids[name]

    def sample(self, name: str) -> np.ndarray:
        """Bilinearly interpolate grid ``name`` at every pixel, edge-clamped."""
        grid = self.grids[name]
        height, width = self.shape
        by0, by1, ty = _axis_weights(height, self.block_size, grid.shape[0])
        bx0, bx1, tx = _axis_weights(width, self.block_size, grid.shape[1])

        ty = ty[:, None]
        tx = tx[None, :]
        b00 = grid[np.ix_(by0, bx0)]
        b10 = grid[np.ix_(by0, bx1)]
        b01 = grid[np.ix_(by1, bx0)]
        b11 = grid[np.ix_(by1, bx1)]

        return (
            b00 * (1 - tx) * (1 - ty)
            + b10 * tx * (1 - ty)
            + b01 * (1 - tx) * ty
            + b11 * tx * ty
        )


def _axis_weights(length: int, block_size: int, blocks: int):
    """Neighbouring block indices and blend weight for each pixel on one axis."""
    f = np.arange(length, dtype=np.float64) / block_size - 0.5
    b0 = np.maximum(0, np.floor(f)).astype(np.intp)
    b1 = np.minimum(blocks - 1, b0 + 1)
    t = np.clip(f - b0, 0.0, 1.0)
    return b0, b1, t


def compute_block_grid(brightness: np.ndarray, block_size: int, reducer: str = MEAN) -> BlockGrid:
    """
    Partition a 2-D brightness plane into ``block_size`` tiles and aggregate.

    The last row and column of tiles may be partial.

    Args:
        brightness: Float array of shape (H, W).
        block_size: Tile edge length in pixels.
        reducer: ``"mean"`` for a single ``mean`` grid, ``"minmax"`` for
            ``low`` and ``high`` grids.

    Returns:
        BlockGrid holding the requested aggregates.
    """
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")

    h, w = brightness.shape
    row_starts = np.arange(0, h, block_size)
    col_starts = np.arange(0, w, block_size)
    block = BlockGrid(block_size=block_size, shape=(h, w))

    if reducer == MEAN:
        sums = np.add.reduceat(np.add.reduceat(brightness, row_starts, axis=0), col_starts, axis=1)
        rows = np.diff(np.append(row_starts, h))
        cols = np.diff(np.append(col_starts, w))
        block.grids["mean"] = sums / np.outer(rows, cols)
    elif reducer == MINMAX:
        block.grids["low"] = np.minimum.reduceat(
            np.minimum.reduceat(brightness, row_starts, axis=0), col_starts, axis=1
        )
        block.grids["high"] = np.maximum.reduceat(
            np.maximum.reduceat(brightness, row_starts, axis=0), col_starts, axis=1
        )
    else:
        raise ValueError(f"Unknown reducer: {reducer!r}")

    return block
