"""Operator command line for the simulated switch."""
from .interpreter import CommandInterpreter, interpret

__all__ = ["CommandInterpreter", "interpret"]
