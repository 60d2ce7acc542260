"""
pondus - AI model benchmark aggregator.

Collects published leaderboard results from a fixed set of providers and
normalizes them into one schema.

Modules:
    collect - cache, alias resolution, provider adapters and the collector
    config - runtime settings and API keys
    output - envelope rendering (json, table, markdown)
    cli - command-line interface entrypoints
"""

__version__ = "0.3.0"
