"""
SpliceDesk - SCTE-35 ad-break signaling console for OvenMediaEngine streams.
"""

__version__ = "0.3.0"
