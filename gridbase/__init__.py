# File: /gridbase/__init__.py | Version: 1.0 | Title: gridbase package
__version__ = "0.3.0"
