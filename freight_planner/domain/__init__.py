"""
Domain layer - planning entities, aggregation services and business rules.
"""
