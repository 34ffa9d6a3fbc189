"""CLI module"""
from .commands import CLI, CLIConfig, create_parser, main

__all__ = [
    "CLI",
    "CLIConfig",
    "create_parser",
    "main",
]
