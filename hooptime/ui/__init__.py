"""
UI package for the HoopTime session tracker.

This package contains the Flask web server that exposes the session engine.
"""
from .web_app import create_app, run_web_app, WebAppState

__all__ = ["create_app", "run_web_app", "WebAppState"]
