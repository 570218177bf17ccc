"""Gradio user interface for ColorIA."""
