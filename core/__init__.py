"""Application lifecycle for the interval alarm."""
from .lifecycle import LifecycleController, RunState, install_signal_handlers

__all__ = ['LifecycleController', 'RunState', 'install_signal_handlers']
