"""Middleware protocol for the perch request pipeline."""

from perch.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
