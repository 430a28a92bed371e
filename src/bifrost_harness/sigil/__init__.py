"""
Sigil - Key material: named accounts and keystores.
"""
