"""
Shared building blocks used by every feature package.

`core/` holds configuration, store access, logging, response envelopes and
request parsing. Feature-specific SQL stays in the feature packages
(`restaurants/`, `reviews/`).
"""
