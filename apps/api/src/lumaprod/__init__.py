"""
LumaProd - Daily devotional content production pipeline.

A backend service that drives one devotional content item per
(date, mode, language) through production:
- Non-repeating bible verse selection
- Capacity-aware creator assignment
- Content lifecycle (submit / approve / reject)
- HeyGen avatar video generation with webhook correlation
- Async notifications and reconciliation with Celery
"""

__version__ = "0.1.0"
