"""Engine.IO frame, packet and payload codecs, and a room broadcaster."""

__version__ = "0.1.0"