"""Safe AQL filter building for document-store queries.

Untrusted filter payloads (structured criteria or free-text search) are turned into a filter
expression plus a bind-variable map. Field names are allowlisted; values are always bound.
"""
