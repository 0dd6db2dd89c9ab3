"""
Commands run by the wp_dbsync CLI
"""
