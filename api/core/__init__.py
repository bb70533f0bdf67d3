"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, logging, the table snapshot types). Keep statement
building and document synthesis in the corresponding feature package
(e.g. `crud/`, `apidoc/`).
"""
