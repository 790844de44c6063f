"""
Static Analysis Package.

This package contains the whole-corpus analysis engine: parsing Go sources,
naming every function canonically, building the inter-procedural call graph
and answering "is this call exercised by a workflow?".

Modules:
    - ``manifest``: ``go.mod`` parsing and module membership queries.
    - ``imports``: Classification of import paths (stdlib, internal, replaced, third party).
    - ``parsing``: tree-sitter wrapper producing ``ParsedFile`` objects.
    - ``package_path``: Ordered strategies resolving a file's package path.
    - ``callgraph``: Canonical call edge extraction.
    - ``classifier``: Workflow / activity entry point detection.
    - ``registry``: Global classification store and reachability queries.
"""
