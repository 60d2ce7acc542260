"""
Collector subsystem.

Modules:
    models - ModelScore, ProviderResult, Envelope
    cache - on-disk TTL cache with atomic writes
    aliases - canonical model name resolution
    transport - HTTP transport and error types
    browser - browser snapshot capabilities for scraped sources
    base_source - shared adapter template
    sources - the eight provider adapters
    registry - provider ids and adapter construction
    collector - query orchestration
"""
