from .settings import config, TrackerConfig

__all__ = ['config', 'TrackerConfig']
