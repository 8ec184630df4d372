"""
Interfaces - Entry points (REST API, CLI).
"""
