"""port-bridge test suite.

- unit/test_ports.py: port queues, closing, single subscriber
- unit/test_unit_loader.py: unit references and construction
- unit/test_io.py: typed input reads, serialized output writes
- unit/test_host_bridge.py: end-to-end bridge runs against tmp directories
- unit/test_ledger_unit.py: the reference ledger unit
- unit/test_cli.py: command-line entry point

Test units shared across modules live in units.py.
"""
