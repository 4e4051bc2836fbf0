"""Run the API server: ``python -m src.api``."""

from src.api.main import run

run()
