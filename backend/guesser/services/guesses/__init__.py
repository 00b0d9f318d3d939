"""Guess domain services: lifecycle, scoring, storage and sweeping.

This package contains the guess state machine that HTTP routes, socket
handlers and the CLI import, keeping transport concerns separated from the
resolution rules.
"""
