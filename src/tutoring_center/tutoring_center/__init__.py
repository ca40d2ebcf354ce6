"""Tutoring center scheduling package.

This package is organized by feature modules (sessions, groups, generation, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
