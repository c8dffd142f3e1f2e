"""Multi-index filter/query engine.

Planner, concurrent executor, merger, batch hydrator and the
sort/paginate stage. Import ``FilterEngine`` from
``productcatalog.query.engine``.
"""
