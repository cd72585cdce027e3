"""
Person directory feature: schemas, SQL, predictor clients, use cases and routes.
"""
