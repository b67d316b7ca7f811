"""Linearize ChatGPT conversation exports into readable YAML/JSON documents."""

__version__ = "0.1.0"
