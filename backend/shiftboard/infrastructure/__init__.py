"""
Infrastructure layer: storage adapters for the scheduling domain.
"""
