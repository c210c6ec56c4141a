"""clickflow: browser flows driven by a multi-strategy interaction engine."""

__version__ = "0.1.0"
