"""
Utilities Package
Configuration loading and the injectable clock
"""

from .clock import AsyncioClock, ZeroDelayClock
from .config import DeployConfig, NetworkConfig, load_networks

__all__ = [
    'AsyncioClock',
    'ZeroDelayClock',
    'DeployConfig',
    'NetworkConfig',
    'load_networks'
]
