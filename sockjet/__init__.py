"""Engine.IO frame and packet codecs, polling payloads and room broadcasting."""

__version__ = "0.1.0"