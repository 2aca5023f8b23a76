# glyphterm/types.py
from typing import NewType, Tuple

EntityId = NewType("EntityId", int)
SystemId = NewType("SystemId", str)
MeshId = NewType("MeshId", str)

# r, g, b, a in [0, 1]
RGBA = Tuple[float, float, float, float]

# width, height in pixels
PixelSize = Tuple[float, float]

# column, row
GridPos = Tuple[int, int]
