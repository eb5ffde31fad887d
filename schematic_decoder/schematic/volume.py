"""Decoded schematic volume."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class EntityRecord:
    """One member of the schematic entity list"""
    id: str = ''


@dataclass(frozen=True)
class Schematic:
    """Volumetric map of material codes read from a .schematic file.

    Cells are stored flattened with x varying fastest, then z, then y:
    index = y * (width * length) + z * width + x.
    """
    width: int
    length: int
    height: int
    materials: str
    blocks: bytes
    data: Optional[bytes] = None
    we_offset_x: int = 0
    we_offset_y: int = 0
    we_offset_z: int = 0
    entities: Tuple[EntityRecord, ...] = field(default_factory=tuple)

    def dimension_x(self) -> int:
        """Number of cells along X."""
        return self.width

    def dimension_y(self) -> int:
        """Number of cells along Y."""
        return self.height

    def dimension_z(self) -> int:
        """Number of cells along Z."""
        return self.length

    @property
    def volume(self) -> int:
        return self.width * self.length * self.height

    def contains(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.length

    def index_of(self, x: int, y: int, z: int) -> int:
        """Flattened buffer index of an in-bounds cell.

        Raises:
            IndexError: If the coordinate lies outside the volume
        """
        if not self.contains(x, y, z):
            raise IndexError(f"Cell ({x}, {y}, {z}) outside {self.width}x{self.height}x{self.length}")
        return y * self.width * self.length + z * self.width + x

    def material_at(self, x: int, y: int, z: int) -> int:
        """Material code of a cell, 0 outside the volume.

        The low byte comes from blocks, the high byte from data when the
        extension buffer is present.
        """
        if not self.contains(x, y, z):
            return 0
        index = y * self.width * self.length + z * self.width + x
        value = self.blocks[index]
        if self.data is not None:
            value |= self.data[index] << 8
        return value

    def is_filled(self, x: int, y: int, z: int) -> bool:
        """Whether a cell holds a non-zero material."""
        return self.material_at(x, y, z) != 0

    def to_array(self) -> np.ndarray:
        """Material codes as a read-only uint16 array indexed [y, z, x]."""
        shape = (self.height, self.length, self.width)
        codes = np.frombuffer(self.blocks, dtype=np.uint8).astype(np.uint16)
        if self.data is not None:
            codes |= np.frombuffer(self.data, dtype=np.uint8).astype(np.uint16) << 8
        codes = codes.reshape(shape)
        codes.flags.writeable = False
        return codes

    def material_counts(self) -> Dict[int, int]:
        """Number of cells per material code."""
        codes, counts = np.unique(self.to_array(), return_counts=True)
        return {int(code): int(count) for code, count in zip(codes, counts)}

    def summary(self) -> Dict[str, Any]:
        array = self.to_array()
        return {
            'dimensions': {
                'x': self.dimension_x(),
                'y': self.dimension_y(),
                'z': self.dimension_z()
            },
            'offset': {
                'x': self.we_offset_x,
                'y': self.we_offset_y,
                'z': self.we_offset_z
            },
            'materials': self.materials,
            'has_extension': self.data is not None,
            'filled_cells': int(np.count_nonzero(array)),
            'entity_count': len(self.entities)
        }
