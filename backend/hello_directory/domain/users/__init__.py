"""
User Domain Module

User records, the storage contract and the directory service.
"""
