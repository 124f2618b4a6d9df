"""Beat catalog search pipeline.

filters (validated criteria) -> query_builder (predicates + sort order)
-> service (page, count, facets, suggestions). The suggestion ranker in
``suggestions`` also serves autocomplete on its own.
"""
