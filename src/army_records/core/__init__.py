"""
Core domain: models, validators, rules and record shapes.
"""
