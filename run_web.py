#!/usr/bin/env python3
"""
Main entry point for the HoopTime web API.

This script launches the Flask-based web server.
"""
import logging

from hooptime.ui.web_app import run_web_app

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_web_app()
