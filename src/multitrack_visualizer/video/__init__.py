"""Frame sinks."""

from multitrack_visualizer.video.encoder import FrameEncoder, FrameSink, PngFrameWriter, upscale

__all__ = ["FrameEncoder", "FrameSink", "PngFrameWriter", "upscale"]
