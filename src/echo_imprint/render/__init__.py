"""Scene rendering: raster frames and video encoding."""

from echo_imprint.render.canvas import CanvasConfig, SceneRasterizer
from echo_imprint.render.encoder import encode_video

__all__ = ["CanvasConfig", "SceneRasterizer", "encode_video"]
