"""
Theurgy - Command implementations for the Bifrost harness CLI.

Each module corresponds to a top-level CLI command:
- transfer:   Send a plain value transfer and wait for inclusion
- precompile: Read from or dispatch into a precompile by function name
"""
