"""State layer.

Holds the per-session count cache and the request epoch that decides
which aggregation attempt is allowed to write to it.
"""
