"""
API Module

HTTP endpoints over the message store.
"""
