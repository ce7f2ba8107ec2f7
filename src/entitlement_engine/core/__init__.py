"""
Core data model, payload normalization and validation rules.
"""
