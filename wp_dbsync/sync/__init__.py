"""
SQL dump rewriting: site URL discovery, domain mapping, search-replace
and multisite blog domain patching
"""
