"""Cooperative script virtual machine with camera, link, scene, input, palette, collision and text helpers."""

__version__ = "0.1.0"