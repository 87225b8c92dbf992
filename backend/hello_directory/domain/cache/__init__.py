"""
Cache Domain Module

Cache-aside domain logic: key generation, namespace policy, store contract.
"""
