"""Built-in filter units.

Every public module here exposes `apply(params, next)` and is registered under
its module name. Modules starting with `_` are helpers, not filters.
"""
