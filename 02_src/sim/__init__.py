"""Scripted conversation simulator."""

from .sim import Sim

__all__ = ["Sim"]
