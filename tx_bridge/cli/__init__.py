"""
TxBridge - CLI Package
========================
"""
