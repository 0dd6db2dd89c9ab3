"""
Utilities shared by the wp_dbsync commands
"""
