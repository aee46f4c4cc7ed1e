"""
Adapters for external systems: the media server's signaling gateway.
"""

from .gateway import CueRequest, GatewayResult, SignalingGateway, StreamRef
from .memory_gateway import InMemorySignalingGateway
from .ome_gateway import OMESignalingGateway

__all__ = [
    "CueRequest",
    "GatewayResult",
    "InMemorySignalingGateway",
    "OMESignalingGateway",
    "SignalingGateway",
    "StreamRef",
]
