"""
HTTP API for the appraisal desk.
"""
