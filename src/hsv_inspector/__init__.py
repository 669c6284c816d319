"""HSV inspector package."""

from .channels import ChannelBias, ChannelRange
from .config import InspectorConfig
from .display import DisplayLoop, LoopState
from .frame_source import AttachError, FrameSource

__all__ = [
    "ChannelBias",
    "ChannelRange",
    "InspectorConfig",
    "DisplayLoop",
    "LoopState",
    "AttachError",
    "FrameSource",
]
