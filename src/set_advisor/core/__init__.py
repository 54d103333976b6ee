"""Recommendation core: intensity model, estimator, anchors and engine."""
