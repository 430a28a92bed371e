"""
Precompiles - Selector tables and calldata encoding for the fixed-address
Bifrost precompiles (staking, offences, governance, balances, relay-manager).
"""
