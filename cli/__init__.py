"""Command line layer for the midPoint CMD connector.

Parses the orchestrator's arguments, runs one operation through the
connector for the requested system, and prints key:value output.
"""
