"""Example computation units for testing and demonstration.

- ledger.LedgerUnit: turns the customer, account and transaction CSV feeds
  into users.json, accounts.json, batch.json and cins.txt.
- bridge.yaml: the default wiring written out as a config file.
"""
